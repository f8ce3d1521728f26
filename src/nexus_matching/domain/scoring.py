"""Per-dimension scoring rules for candidate-requirement matching.

Every function here is pure: it reads only its arguments, so scoring many
candidates concurrently needs no locking.

Usage example:
    from nexus_matching.domain.models import Candidate, Requirement
    from nexus_matching.domain.scoring import score
    from nexus_matching.domain.weights import DEFAULT_WEIGHTS

    result = score(
        Requirement(sector="finance", training_type="Risk"),
        Candidate(id="p-1", name="Layla"),
        DEFAULT_WEIGHTS,
    )
    assert 0.0 <= result.overall_score <= 1.0
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable

from ..exceptions import ComputationError
from .explanations import build_reasons
from .models import (
    Candidate,
    MatchScore,
    Requirement,
    TrainingFormat,
    level_for_years,
    spoken_languages,
)
from .taxonomy import Sector
from .weights import WeightVector

SECTOR_UNSPECIFIED_SCORE = 0.5
LANGUAGE_PARTIAL_SCORE = 0.6
HYBRID_FALLBACK_SCORE = 0.7
LOCATION_MISMATCH_SCORE = 0.3
CULTURAL_FIT_UNKNOWN_SCORE = 0.5
CULTURAL_KEYWORD_SATURATION = 2
MAX_RATING = 5.0
# Ordinal distance between entry (1) and expert (5).
MAX_LEVEL_DELTA = 4


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def validate_candidate(candidate: Candidate) -> None:
    """Reject records the scoring rules cannot interpret.

    Raises:
        ComputationError: If years, rating or rate are missing, not numbers
            or out of range.
    """
    years = candidate.years_experience
    if not _is_finite_number(years) or years < 0.0:
        raise ComputationError(candidate.id, f"years_experience={years!r}")
    rating = candidate.rating
    if not _is_finite_number(rating) or not 0.0 <= rating <= MAX_RATING:
        raise ComputationError(candidate.id, f"rating={rating!r}")
    rate = candidate.rate_per_hour
    if rate is not None and not _is_finite_number(rate):
        raise ComputationError(candidate.id, f"rate_per_hour={rate!r}")


def sector_match(requirement: Requirement, candidate: Candidate) -> float:
    if not candidate.sector_affinity:
        return SECTOR_UNSPECIFIED_SCORE
    return 1.0 if requirement.sector in candidate.sector_affinity else 0.0


def language_match(requirement: Requirement, candidate: Candidate) -> float:
    requested = spoken_languages(requirement.preferred_language)
    offered = candidate.spoken_languages
    if not offered or offered.isdisjoint(requested):
        return 0.0
    if offered == requested:
        return 1.0
    return LANGUAGE_PARTIAL_SCORE


def format_match(requirement: Requirement, candidate: Candidate) -> float:
    if requirement.format in candidate.formats_supported:
        return 1.0
    if TrainingFormat.HYBRID in candidate.formats_supported and requirement.format in (
        TrainingFormat.ONLINE,
        TrainingFormat.IN_PERSON,
    ):
        return HYBRID_FALLBACK_SCORE
    return 0.0


def experience_match(requirement: Requirement, candidate: Candidate) -> float:
    candidate_level = level_for_years(candidate.years_experience)
    delta = abs(requirement.experience_level.ordinal - candidate_level.ordinal)
    return max(0.0, 1.0 - delta / MAX_LEVEL_DELTA)


def location_match(requirement: Requirement, candidate: Candidate) -> float:
    if requirement.format is TrainingFormat.ONLINE:
        return 1.0
    wanted = (requirement.location or "").strip().lower()
    if not wanted:
        return 1.0
    have = (candidate.location or "").strip().lower()
    if have and (wanted in have or have in wanted):
        return 1.0
    return LOCATION_MISMATCH_SCORE


def _keyword_hits(keywords: Iterable[str], haystack: Iterable[str]) -> int:
    texts = [text.lower() for text in haystack if text]
    patterns = [re.compile(rf"\b{re.escape(keyword.lower())}\b") for keyword in keywords]
    return sum(1 for pattern in patterns if any(pattern.search(text) for text in texts))


def cultural_fit(
    requirement: Requirement,
    candidate: Candidate,
    sector: Sector | None,
    language_score: float | None = None,
) -> float:
    """Mean of the available soft signals, or 0.5 when there are none."""
    signals: list[float] = []
    if candidate.languages:
        signals.append(
            language_score if language_score is not None else language_match(requirement, candidate)
        )
    if sector is not None and sector.cultural_keywords:
        evidence = (*candidate.expertise_tags, *candidate.certifications)
        if evidence:
            hits = _keyword_hits(sector.cultural_keywords, (*evidence, candidate.title))
            signals.append(0.5 + 0.5 * min(1.0, hits / CULTURAL_KEYWORD_SATURATION))
    if not signals:
        return CULTURAL_FIT_UNKNOWN_SCORE
    return clamp(sum(signals) / len(signals))


def score(
    requirement: Requirement,
    candidate: Candidate,
    weights: WeightVector,
    sector: Sector | None = None,
) -> MatchScore:
    """Score one candidate against one requirement under ``weights``.

    ``sector`` supplies the cultural keyword list; without it cultural fit
    relies on language alignment alone.

    Raises:
        ComputationError: If the candidate record is malformed.
    """
    validate_candidate(candidate)
    try:
        language = language_match(requirement, candidate)
        dimensions = {
            "sector": sector_match(requirement, candidate),
            "language": language,
            "format": format_match(requirement, candidate),
            "experience": experience_match(requirement, candidate),
            "location": location_match(requirement, candidate),
            "cultural_fit": cultural_fit(requirement, candidate, sector, language),
        }
    except (TypeError, AttributeError) as exc:
        raise ComputationError(candidate.id, f"unreadable field: {exc}") from exc
    dimensions = {name: clamp(value) for name, value in dimensions.items()}
    weight_map = weights.as_dict()
    overall = clamp(math.fsum(dimensions[name] * weight_map[name] for name in dimensions))
    return MatchScore(
        candidate_id=candidate.id,
        overall_score=overall,
        sector_match=dimensions["sector"],
        language_match=dimensions["language"],
        format_match=dimensions["format"],
        experience_match=dimensions["experience"],
        location_match=dimensions["location"],
        cultural_fit=dimensions["cultural_fit"],
        reasons=build_reasons(dimensions),
    )
