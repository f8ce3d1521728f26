"""Total order over recommendations."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Recommendation


def recommendation_sort_key(recommendation: Recommendation) -> tuple[float, float, str]:
    """Overall score desc, then rating desc, then candidate id asc."""
    return (
        -recommendation.score.overall_score,
        -recommendation.candidate.rating,
        recommendation.candidate.id,
    )


def sort_recommendations(recommendations: Iterable[Recommendation]) -> tuple[Recommendation, ...]:
    return tuple(sorted(recommendations, key=recommendation_sort_key))
