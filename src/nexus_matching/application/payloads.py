"""Inbound payload parsing and outbound serialisation.

Payload keys follow the surrounding application's camelCase JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..domain.explanations import summarize_dimensions
from ..domain.models import (
    Candidate,
    ExperienceLevel,
    FeedbackRecord,
    Language,
    MatchScore,
    RecommendationSet,
    Requirement,
    Suggestion,
    TrainingFormat,
)
from ..exceptions import InvalidEnumValueError, MalformedFeedbackError, ValidationError

RELAXED_TRAINING_TYPE = "general"

_ENUM_FIELDS: dict[str, type[StrEnum]] = {
    "preferredLanguage": Language,
    "format": TrainingFormat,
    "experienceLevel": ExperienceLevel,
}

_INPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    str_strip_whitespace=True,
)


def _match_enum(enum_type: type[StrEnum], value: object) -> object:
    """Map relaxed spellings (``in-person``, ``EXPERT``) onto enum members."""
    if not isinstance(value, str):
        return value
    token = value.strip().replace("-", "_").replace(" ", "_").lower()
    for member in enum_type:
        if member.value.lower() == token:
            return member
    return value


class RequirementInput(BaseModel):
    """A full search request; every enum field is mandatory."""

    model_config = _INPUT_CONFIG

    sector: str = Field(min_length=1)
    training_type: str = Field(min_length=1)
    preferred_language: Language
    format: TrainingFormat
    experience_level: ExperienceLevel
    budget_per_hour: float | None = Field(default=None, ge=0.0, strict=True, allow_inf_nan=False)
    timeframe: str | None = None
    specific_skills: list[str] = Field(default_factory=list)
    location: str | None = None

    @field_validator("preferred_language", mode="before")
    @classmethod
    def _relaxed_language(cls, value: object) -> object:
        return _match_enum(Language, value)

    @field_validator("format", mode="before")
    @classmethod
    def _relaxed_format(cls, value: object) -> object:
        return _match_enum(TrainingFormat, value)

    @field_validator("experience_level", mode="before")
    @classmethod
    def _relaxed_experience(cls, value: object) -> object:
        return _match_enum(ExperienceLevel, value)

    @field_validator("timeframe", "location")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        return value or None

    def to_requirement(self) -> Requirement:
        return Requirement(
            sector=self.sector,
            training_type=self.training_type,
            preferred_language=self.preferred_language,
            format=self.format,
            experience_level=self.experience_level,
            budget_per_hour=self.budget_per_hour,
            timeframe=self.timeframe,
            specific_skills=frozenset(skill for skill in self.specific_skills if skill),
            location=self.location,
        )


class PartialRequirementInput(RequirementInput):
    """A live-suggestion request; only ``sector`` is mandatory."""

    training_type: str = RELAXED_TRAINING_TYPE
    preferred_language: Language = Language.ENGLISH
    format: TrainingFormat = TrainingFormat.HYBRID
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE

    @model_validator(mode="before")
    @classmethod
    def _drop_empty(cls, data: object) -> object:
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None and value != ""}
        return data


class FeedbackInput(BaseModel):
    model_config = _INPUT_CONFIG

    candidate_id: str = Field(min_length=1)
    booking_success: bool = Field(strict=True)
    rating: float | None = Field(default=None, strict=True, allow_inf_nan=False)
    feedback: str | None = None
    requirement_signature: str | None = None

    @field_validator("candidate_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


def _field_name(error: Mapping[str, Any]) -> str:
    return ".".join(str(part) for part in error["loc"]) or "payload"


def _requirement_error(exc: PydanticValidationError) -> ValidationError:
    error = exc.errors(include_url=False)[0]
    field = _field_name(error)
    enum_type = _ENUM_FIELDS.get(field)
    if enum_type is not None and error["type"] == "enum":
        allowed = tuple(member.value for member in enum_type)
        return InvalidEnumValueError(field, error["input"], allowed)
    if error["type"] == "missing":
        return ValidationError(f"{field} is required.")
    return ValidationError(f"{field}: {error['msg']}")


def parse_requirement(payload: Mapping[str, Any]) -> Requirement:
    """Parse a full search request.

    Raises:
        ValidationError: If a required field is missing or malformed.
        InvalidEnumValueError: If an enum field holds an unsupported value.
    """
    try:
        return RequirementInput.model_validate(dict(payload)).to_requirement()
    except PydanticValidationError as exc:
        raise _requirement_error(exc) from exc


def parse_partial_requirement(payload: Mapping[str, Any]) -> Requirement:
    """Parse a live-suggestion request; missing fields take relaxed defaults."""
    try:
        return PartialRequirementInput.model_validate(dict(payload)).to_requirement()
    except PydanticValidationError as exc:
        raise _requirement_error(exc) from exc


def parse_feedback_submission(
    payload: Mapping[str, Any],
    *,
    recorded_at: datetime,
    requirement_signature: str | None = None,
) -> FeedbackRecord:
    """Parse a feedback submission.

    The signature comes from the payload's ``requirementSignature`` when
    present, otherwise from ``requirement_signature`` (the caller's most
    recent search context).

    Raises:
        MalformedFeedbackError: If required fields are missing or malformed.
    """
    try:
        submission = FeedbackInput.model_validate(dict(payload))
    except PydanticValidationError as exc:
        error = exc.errors(include_url=False)[0]
        raise MalformedFeedbackError(f"{_field_name(error)}: {error['msg']}") from exc

    signature = submission.requirement_signature or (requirement_signature or "").strip()
    if not signature:
        raise MalformedFeedbackError("no requirement context to attach feedback to")

    return FeedbackRecord(
        requirement_signature=signature,
        candidate_id=submission.candidate_id,
        booking_success=submission.booking_success,
        recorded_at=recorded_at,
        rating=submission.rating,
        free_text_feedback=submission.feedback or None,
    )


def candidate_to_dict(candidate: Candidate) -> dict[str, Any]:
    return {
        "id": candidate.id,
        "name": candidate.name,
        "title": candidate.title,
        "location": candidate.location,
        "yearsExperience": candidate.years_experience,
        "ratePerHour": candidate.rate_per_hour,
        "rating": candidate.rating,
        "languages": sorted(language.value for language in candidate.languages),
        "formats": sorted(item.value for item in candidate.formats_supported),
        "expertise": sorted(candidate.expertise_tags),
        "certifications": list(candidate.certifications),
        "sectorAffinity": sorted(candidate.sector_affinity),
    }


def match_score_to_dict(match: MatchScore) -> dict[str, Any]:
    return {
        "overallScore": match.overall_score,
        "sectorMatch": match.sector_match,
        "languageMatch": match.language_match,
        "formatMatch": match.format_match,
        "experienceMatch": match.experience_match,
        "locationMatch": match.location_match,
        "culturalFit": match.cultural_fit,
        "reasons": list(match.reasons),
    }


def recommendation_set_to_dict(result: RecommendationSet) -> dict[str, Any]:
    insights = summarize_dimensions(result.recommendations)
    return {
        "requirementSignature": result.signature,
        "totalFound": result.total_found,
        "generatedAt": result.generated_at.isoformat(),
        "degraded": result.degraded,
        "recommendations": [
            {
                "candidate": candidate_to_dict(item.candidate),
                "matchScore": match_score_to_dict(item.score),
                "matchStrength": item.match_strength,
            }
            for item in result.recommendations
        ],
        "insights": {
            "averageScore": insights.average_score,
            "topFactor": insights.top_factor,
            "dimensionAverages": dict(insights.dimension_averages),
        },
    }


def suggestion_to_dict(suggestion: Suggestion) -> dict[str, Any]:
    return {
        "candidateId": suggestion.candidate_id,
        "name": suggestion.name,
        "title": suggestion.title,
        "score": suggestion.score,
    }
