"""Human-readable explanations layered over already-computed dimension scores.

Everything here is pure formatting: no scoring maths, no state.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import MatchScore, Recommendation

REASON_THRESHOLD = 0.8
MAX_REASONS = 4
HINT_THRESHOLD = 0.5

REASON_TEXT = {
    "sector": "Sector expertise confirmed",
    "language": "Fluent in requested language",
    "format": "Delivers the requested training format",
    "experience": "Experience level matches requirement",
    "location": "Well placed for the training location",
    "cultural_fit": "Strong regional and cultural alignment",
}

HINT_TEXT = {
    "sector": "Build visible expertise in the requested sector",
    "language": "Add delivery capability in the requested language",
    "format": "Offer the requested training delivery format",
    "experience": "Experience level differs from what the role expects",
    "location": "Consider travel or remote delivery for this location",
    "cultural_fit": "Highlight regional, regulatory or localisation experience",
}

# (threshold, label), highest first
STRENGTH_BANDS: tuple[tuple[float, str], ...] = (
    (0.8, "Excellent Match"),
    (0.6, "Good Match"),
    (0.4, "Fair Match"),
)
BASIC_STRENGTH = "Basic Match"


def build_reasons(dimensions: Mapping[str, float]) -> tuple[str, ...]:
    """Return reason strings for strong dimensions.

    One reason per dimension scoring at least ``REASON_THRESHOLD``, ordered by
    score descending (ties keep canonical dimension order), capped at
    ``MAX_REASONS``.
    """
    order = {name: index for index, name in enumerate(REASON_TEXT)}
    strong = [
        (name, value)
        for name, value in dimensions.items()
        if name in REASON_TEXT and value >= REASON_THRESHOLD
    ]
    strong.sort(key=lambda item: (-item[1], order[item[0]]))
    return tuple(REASON_TEXT[name] for name, _ in strong[:MAX_REASONS])


def match_strength(score: float) -> str:
    """Map an overall score onto a display band."""
    for threshold, label in STRENGTH_BANDS:
        if score >= threshold:
            return label
    return BASIC_STRENGTH


def improvement_hints(score: MatchScore) -> tuple[str, ...]:
    """Advice for each dimension below ``HINT_THRESHOLD``, weakest first."""
    weak = [(name, value) for name, value in score.dimensions().items() if value < HINT_THRESHOLD]
    weak.sort(key=lambda item: item[1])
    return tuple(HINT_TEXT[name] for name, _ in weak)


@dataclass(frozen=True)
class SearchInsights:
    """Aggregate view over a ranked result list."""

    average_score: float
    dimension_averages: tuple[tuple[str, float], ...]

    @property
    def top_factor(self) -> str | None:
        if not self.dimension_averages:
            return None
        return self.dimension_averages[0][0]


def summarize_dimensions(recommendations: Sequence[Recommendation]) -> SearchInsights:
    """Average overall and per-dimension scores, dimensions ordered strongest first."""
    if not recommendations:
        return SearchInsights(average_score=0.0, dimension_averages=())
    count = len(recommendations)
    totals: dict[str, float] = {}
    for recommendation in recommendations:
        for name, value in recommendation.score.dimensions().items():
            totals[name] = totals.get(name, 0.0) + value
    averages = [(name, total / count) for name, total in totals.items()]
    averages.sort(key=lambda item: -item[1])
    overall = sum(r.score.overall_score for r in recommendations) / count
    return SearchInsights(average_score=overall, dimension_averages=tuple(averages))
