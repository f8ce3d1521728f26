"""Tests for inbound payload parsing and outbound serialisation."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from nexus_matching.application.payloads import (
    parse_feedback_submission,
    parse_partial_requirement,
    parse_requirement,
    recommendation_set_to_dict,
    suggestion_to_dict,
)
from nexus_matching.domain.models import (
    ExperienceLevel,
    Language,
    Recommendation,
    RecommendationSet,
    Suggestion,
    TrainingFormat,
)
from nexus_matching.domain.scoring import score
from nexus_matching.domain.weights import DEFAULT_WEIGHTS
from nexus_matching.exceptions import InvalidEnumValueError, MalformedFeedbackError, ValidationError
from tests.support.factories import make_candidate, make_requirement

RECORDED_AT = datetime(2024, 6, 1, 9, 0, tzinfo=UTC)


def _search_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "sector": "oil-gas",
        "trainingType": "Safety Training",
        "preferredLanguage": "BILINGUAL",
        "format": "HYBRID",
        "experienceLevel": "senior",
        "budgetPerHour": 500,
        "specificSkills": ["H2S", " Well Control "],
        "location": "Abu Dhabi",
    }
    payload.update(overrides)
    return payload


def test_parse_requirement_reads_camel_case_payload() -> None:
    requirement = parse_requirement(_search_payload())

    assert requirement.sector == "oil-gas"
    assert requirement.preferred_language is Language.BILINGUAL
    assert requirement.format is TrainingFormat.HYBRID
    assert requirement.experience_level is ExperienceLevel.SENIOR
    assert requirement.budget_per_hour == 500.0
    assert requirement.specific_skills == {"H2S", "Well Control"}


def test_parse_requirement_accepts_relaxed_enum_spelling() -> None:
    requirement = parse_requirement(_search_payload(format="in-person", experienceLevel="EXPERT"))

    assert requirement.format is TrainingFormat.IN_PERSON
    assert requirement.experience_level is ExperienceLevel.EXPERT


def test_invalid_enum_value_is_reported() -> None:
    with pytest.raises(InvalidEnumValueError) as exc_info:
        parse_requirement(_search_payload(preferredLanguage="FRENCH"))

    assert isinstance(exc_info.value, ValidationError)
    assert "preferredLanguage" in str(exc_info.value)
    assert exc_info.value.allowed == ("ENGLISH", "ARABIC", "BILINGUAL")


def test_missing_enum_field_is_required() -> None:
    payload = _search_payload()
    del payload["experienceLevel"]

    with pytest.raises(ValidationError, match="experienceLevel is required"):
        parse_requirement(payload)


@pytest.mark.parametrize(
    "overrides",
    [
        {"trainingType": ""},
        {"sector": None},
        {"format": None},
        {"budgetPerHour": -5},
        {"budgetPerHour": "cheap"},
        {"specificSkills": "H2S"},
        {"budgetPerHour": True},
        {"budgetPerHour": float("inf")},
    ],
)
def test_parse_requirement_rejects_malformed_fields(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        parse_requirement(_search_payload(**overrides))


def test_parse_partial_requirement_defaults_missing_fields() -> None:
    requirement = parse_partial_requirement({"sector": "finance"})

    assert requirement.training_type == "general"
    assert requirement.preferred_language is Language.ENGLISH
    assert requirement.format is TrainingFormat.HYBRID
    assert requirement.experience_level is ExperienceLevel.INTERMEDIATE


def test_parse_partial_requirement_treats_blank_fields_as_missing() -> None:
    requirement = parse_partial_requirement(
        {"sector": "finance", "trainingType": "", "format": None, "location": "  "}
    )

    assert requirement.training_type == "general"
    assert requirement.format is TrainingFormat.HYBRID
    assert requirement.location is None


def test_parse_partial_requirement_still_needs_sector() -> None:
    with pytest.raises(ValidationError):
        parse_partial_requirement({"trainingType": "Risk"})


def test_parse_feedback_prefers_explicit_signature() -> None:
    record = parse_feedback_submission(
        {"candidateId": 42, "bookingSuccess": True, "rating": 4, "requirementSignature": "abc"},
        recorded_at=RECORDED_AT,
        requirement_signature="fallback",
    )

    assert record.candidate_id == "42"
    assert record.requirement_signature == "abc"
    assert record.rating == 4.0
    assert record.recorded_at == RECORDED_AT


def test_parse_feedback_falls_back_to_context_signature() -> None:
    record = parse_feedback_submission(
        {"candidateId": "p-1", "bookingSuccess": False, "feedback": "  Great  "},
        recorded_at=RECORDED_AT,
        requirement_signature="context",
    )

    assert record.requirement_signature == "context"
    assert record.free_text_feedback == "Great"


@pytest.mark.parametrize(
    "payload",
    [
        {"bookingSuccess": True},
        {"candidateId": "p-1", "bookingSuccess": "yes"},
        {"candidateId": "p-1", "bookingSuccess": True, "rating": "five"},
        {"candidateId": "p-1", "bookingSuccess": True, "rating": float("nan")},
        {"candidateId": "  ", "bookingSuccess": True, "requirementSignature": "abc"},
        {"candidateId": "p-1", "bookingSuccess": True},
    ],
)
def test_parse_feedback_rejects_malformed_payloads(payload: dict[str, object]) -> None:
    with pytest.raises(MalformedFeedbackError):
        parse_feedback_submission(payload, recorded_at=RECORDED_AT)


def test_recommendation_set_to_dict() -> None:
    requirement = make_requirement()
    candidate = make_candidate()
    result = RecommendationSet(
        requirement=requirement,
        total_found=3,
        recommendations=(Recommendation(score(requirement, candidate, DEFAULT_WEIGHTS), candidate),),
        generated_at=RECORDED_AT,
    )

    payload = recommendation_set_to_dict(result)

    assert payload["totalFound"] == 3
    assert payload["generatedAt"] == "2024-06-01T09:00:00+00:00"
    assert payload["requirementSignature"] == result.signature
    item = payload["recommendations"][0]
    assert item["candidate"]["languages"] == ["ARABIC", "ENGLISH"]
    assert item["matchScore"]["sectorMatch"] == 1.0
    assert item["matchStrength"] == "Excellent Match"
    insights = payload["insights"]
    assert insights["averageScore"] == item["matchScore"]["overallScore"]
    assert set(insights["dimensionAverages"]) == {
        "sector",
        "language",
        "format",
        "experience",
        "location",
        "cultural_fit",
    }


def test_suggestion_to_dict() -> None:
    suggestion = Suggestion(candidate_id="p-1", name="Layla", title="Trainer", score=0.91)

    assert suggestion_to_dict(suggestion) == {
        "candidateId": "p-1",
        "name": "Layla",
        "title": "Trainer",
        "score": 0.91,
    }
