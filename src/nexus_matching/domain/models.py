"""Domain value objects for requirements, candidates and match results.

Usage example:
    from nexus_matching.domain.models import (
        Candidate,
        ExperienceLevel,
        Language,
        Requirement,
        TrainingFormat,
    )

    requirement = Requirement(
        sector="oil-gas",
        training_type="Safety Training",
        preferred_language=Language.BILINGUAL,
        format=TrainingFormat.HYBRID,
        experience_level=ExperienceLevel.SENIOR,
    )
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from .explanations import match_strength


class Language(StrEnum):
    """Delivery language requested by a requirement."""

    ENGLISH = "ENGLISH"
    ARABIC = "ARABIC"
    BILINGUAL = "BILINGUAL"


class TrainingFormat(StrEnum):
    """Training delivery format."""

    ONLINE = "ONLINE"
    IN_PERSON = "IN_PERSON"
    HYBRID = "HYBRID"


class ExperienceLevel(StrEnum):
    """Seniority expected of the trainer, ordered entry → expert."""

    ENTRY = "entry"
    JUNIOR = "junior"
    INTERMEDIATE = "intermediate"
    SENIOR = "senior"
    EXPERT = "expert"

    @property
    def ordinal(self) -> int:
        """Position on the shared 1..5 scale."""
        return _LEVEL_ORDINALS[self]


_LEVEL_ORDINALS = {
    ExperienceLevel.ENTRY: 1,
    ExperienceLevel.JUNIOR: 2,
    ExperienceLevel.INTERMEDIATE: 3,
    ExperienceLevel.SENIOR: 4,
    ExperienceLevel.EXPERT: 5,
}

# Lower bound (years) for each level; a candidate sits at the highest level reached.
EXPERIENCE_LEVEL_MIN_YEARS: tuple[tuple[ExperienceLevel, float], ...] = (
    (ExperienceLevel.EXPERT, 12.0),
    (ExperienceLevel.SENIOR, 8.0),
    (ExperienceLevel.INTERMEDIATE, 5.0),
    (ExperienceLevel.JUNIOR, 2.0),
    (ExperienceLevel.ENTRY, 0.0),
)


def level_for_years(years: float) -> ExperienceLevel:
    """Map years of experience onto the requirement experience scale."""
    for level, min_years in EXPERIENCE_LEVEL_MIN_YEARS:
        if years >= min_years:
            return level
    return ExperienceLevel.ENTRY


def spoken_languages(language: Language) -> frozenset[Language]:
    """Expand a language preference into the concrete languages it needs."""
    if language is Language.BILINGUAL:
        return frozenset({Language.ENGLISH, Language.ARABIC})
    return frozenset({language})


def _empty_strings() -> frozenset[str]:
    return frozenset()


@dataclass(frozen=True)
class Requirement:
    """A structured training need submitted by a searching organisation."""

    sector: str
    training_type: str
    preferred_language: Language = Language.ENGLISH
    format: TrainingFormat = TrainingFormat.HYBRID
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    budget_per_hour: float | None = None
    timeframe: str | None = None
    specific_skills: frozenset[str] = field(default_factory=_empty_strings)
    location: str | None = None


def requirement_signature(requirement: Requirement) -> str:
    """Return a stable SHA-256 signature for a requirement.

    Skills are sorted so insertion order never changes the signature.
    """
    canonical = {
        "sector": requirement.sector,
        "training_type": requirement.training_type.strip().lower(),
        "preferred_language": requirement.preferred_language.value,
        "format": requirement.format.value,
        "experience_level": requirement.experience_level.value,
        "budget_per_hour": requirement.budget_per_hour,
        "timeframe": requirement.timeframe,
        "specific_skills": sorted(skill.strip().lower() for skill in requirement.specific_skills),
        "location": (requirement.location or "").strip().lower() or None,
    }
    payload = json.dumps(canonical, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _empty_languages() -> frozenset[Language]:
    return frozenset()


def _empty_formats() -> frozenset[TrainingFormat]:
    return frozenset()


@dataclass(frozen=True)
class Candidate:
    """Read projection of a professional profile held by the candidate index."""

    id: str
    name: str
    title: str = ""
    location: str | None = None
    years_experience: float = 0.0
    rate_per_hour: float | None = None
    rating: float = 0.0
    languages: frozenset[Language] = field(default_factory=_empty_languages)
    formats_supported: frozenset[TrainingFormat] = field(default_factory=_empty_formats)
    expertise_tags: frozenset[str] = field(default_factory=_empty_strings)
    certifications: tuple[str, ...] = ()
    sector_affinity: frozenset[str] = field(default_factory=_empty_strings)

    @property
    def spoken_languages(self) -> frozenset[Language]:
        """Concrete languages the candidate can deliver in."""
        expanded: set[Language] = set()
        for language in self.languages:
            expanded |= spoken_languages(language)
        return frozenset(expanded)


@dataclass(frozen=True)
class MatchScore:
    """Six-dimension match result for one candidate against one requirement."""

    candidate_id: str
    overall_score: float
    sector_match: float
    language_match: float
    format_match: float
    experience_match: float
    location_match: float
    cultural_fit: float
    reasons: tuple[str, ...] = ()

    def dimensions(self) -> dict[str, float]:
        """Return dimension scores keyed by dimension name, in canonical order."""
        return {
            "sector": self.sector_match,
            "language": self.language_match,
            "format": self.format_match,
            "experience": self.experience_match,
            "location": self.location_match,
            "cultural_fit": self.cultural_fit,
        }


@dataclass(frozen=True)
class Recommendation:
    """A match score with the denormalised candidate it describes."""

    score: MatchScore
    candidate: Candidate

    @property
    def match_strength(self) -> str:
        return match_strength(self.score.overall_score)


@dataclass(frozen=True)
class RecommendationSet:
    """Ranked recommendations for one search."""

    requirement: Requirement
    total_found: int
    recommendations: tuple[Recommendation, ...]
    generated_at: datetime
    degraded: bool = False

    @property
    def signature(self) -> str:
        return requirement_signature(self.requirement)


@dataclass(frozen=True)
class Suggestion:
    """Lightweight live-suggestion tuple."""

    candidate_id: str
    name: str
    title: str
    score: float


@dataclass(frozen=True)
class FeedbackRecord:
    """Post-engagement outcome for a (requirement, candidate) pair."""

    requirement_signature: str
    candidate_id: str
    booking_success: bool
    recorded_at: datetime
    rating: float | None = None
    free_text_feedback: str | None = None

    @property
    def outcome(self) -> float:
        """Outcome signal in 0..1 used for weight adaptation.

        Booking success alone when unrated; blended 50/50 with rating/5 otherwise.
        """
        booked = 1.0 if self.booking_success else 0.0
        if self.rating is None:
            return booked
        return 0.5 * booked + 0.5 * (self.rating / 5.0)


@dataclass(frozen=True)
class FeedbackAck:
    """Acknowledgement returned after a feedback record is stored."""

    requirement_signature: str
    candidate_id: str
    recorded_at: datetime
    scores_attached: bool
