"""Tests for reasons, strength bands and improvement hints."""

import pytest

from nexus_matching.domain.explanations import (
    HINT_TEXT,
    REASON_TEXT,
    build_reasons,
    improvement_hints,
    match_strength,
    summarize_dimensions,
)
from nexus_matching.domain.models import MatchScore, Recommendation
from tests.support.factories import make_candidate


def _match(candidate_id: str = "p-1", **dimensions: float) -> MatchScore:
    values = {
        "sector_match": 1.0,
        "language_match": 1.0,
        "format_match": 1.0,
        "experience_match": 1.0,
        "location_match": 1.0,
        "cultural_fit": 1.0,
    }
    values.update(dimensions)
    return MatchScore(candidate_id=candidate_id, overall_score=0.9, **values)


def test_build_reasons_caps_at_four_in_dimension_order_on_ties() -> None:
    reasons = build_reasons(_match().dimensions())

    assert reasons == (
        REASON_TEXT["sector"],
        REASON_TEXT["language"],
        REASON_TEXT["format"],
        REASON_TEXT["experience"],
    )


def test_build_reasons_orders_by_score_and_skips_weak_dimensions() -> None:
    dimensions = {"sector": 0.85, "language": 0.5, "location": 1.0}

    assert build_reasons(dimensions) == (REASON_TEXT["location"], REASON_TEXT["sector"])


@pytest.mark.parametrize(
    ("score", "label"),
    [(0.95, "Excellent Match"), (0.8, "Excellent Match"), (0.6, "Good Match"),
     (0.45, "Fair Match"), (0.1, "Basic Match")],
)
def test_match_strength_bands(score: float, label: str) -> None:
    assert match_strength(score) == label


def test_improvement_hints_lists_weakest_first() -> None:
    hints = improvement_hints(_match(location_match=0.3, language_match=0.0, format_match=0.7))

    assert hints == (HINT_TEXT["language"], HINT_TEXT["location"])


def test_summarize_dimensions_averages_scores() -> None:
    recommendations = [
        Recommendation(score=_match("a", location_match=0.3), candidate=make_candidate("a")),
        Recommendation(score=_match("b", location_match=0.5), candidate=make_candidate("b")),
    ]

    insights = summarize_dimensions(recommendations)

    assert insights.average_score == pytest.approx(0.9)
    assert dict(insights.dimension_averages)["location"] == pytest.approx(0.4)
    assert insights.dimension_averages[-1][0] == "location"
    assert insights.top_factor == "sector"


def test_summarize_dimensions_of_nothing() -> None:
    insights = summarize_dimensions([])

    assert insights.average_score == 0.0
    assert insights.top_factor is None
