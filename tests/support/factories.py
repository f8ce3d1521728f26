"""Builders for domain objects used across tests."""

from __future__ import annotations

from typing import Any

from nexus_matching.domain.models import (
    Candidate,
    ExperienceLevel,
    Language,
    Requirement,
    TrainingFormat,
)


def make_requirement(**overrides: Any) -> Requirement:
    """Oil and gas safety training, bilingual, hybrid, senior, in Abu Dhabi."""
    values: dict[str, Any] = {
        "sector": "oil-gas",
        "training_type": "Safety Training",
        "preferred_language": Language.BILINGUAL,
        "format": TrainingFormat.HYBRID,
        "experience_level": ExperienceLevel.SENIOR,
        "location": "Abu Dhabi",
    }
    values.update(overrides)
    return Requirement(**values)


def make_candidate(candidate_id: str = "p-1", **overrides: Any) -> Candidate:
    """A strong match for ``make_requirement()`` unless overridden."""
    values: dict[str, Any] = {
        "id": candidate_id,
        "name": f"Trainer {candidate_id}",
        "title": "HSE Training Lead",
        "location": "Abu Dhabi",
        "years_experience": 10.0,
        "rate_per_hour": 450.0,
        "rating": 4.5,
        "languages": frozenset({Language.ENGLISH, Language.ARABIC}),
        "formats_supported": frozenset({TrainingFormat.HYBRID, TrainingFormat.IN_PERSON}),
        "expertise_tags": frozenset({"oil", "drilling", "safety"}),
        "certifications": ("NEBOSH",),
        "sector_affinity": frozenset({"oil-gas"}),
    }
    values.update(overrides)
    return Candidate(**values)


def profile_payload(profile_id: int | str = 1, **overrides: Any) -> dict[str, Any]:
    """A camelCase profile record as served by the profile store."""
    payload: dict[str, Any] = {
        "id": profile_id,
        "firstName": "Layla",
        "lastName": "Haddad",
        "title": "Drilling Safety Trainer",
        "location": "Abu Dhabi",
        "yearsExperience": 9,
        "ratePerHour": 400,
        "rating": 4.7,
        "languages": ["english", "arabic"],
        "formats": ["in-person", "hybrid"],
        "expertise": [{"name": "Drilling"}, {"name": "Well Control"}],
        "certifications": ["IOSH"],
        "sectorAffinity": "oil-gas",
        "updatedAt": "2024-05-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload
