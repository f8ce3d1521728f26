"""Job postings and inference of a matching requirement from posting text.

Usage example:
    from nexus_matching.domain.jobs import JobPosting, requirement_from_job
    from nexus_matching.domain.taxonomy import DEFAULT_SECTOR_CATALOG

    job = JobPosting(
        id="job-7",
        title="Senior HSE Trainer",
        description="Deliver drilling safety courses in Arabic and English (bilingual).",
        requirements="10+ years experience in oil and gas",
        location="Abu Dhabi",
        job_type="contract",
    )
    requirement = requirement_from_job(job, DEFAULT_SECTOR_CATALOG)
    assert requirement.sector == "oil-gas"
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..exceptions import UnknownSectorError
from .models import ExperienceLevel, Language, Requirement, TrainingFormat, level_for_years
from .taxonomy import SectorCatalog

_YEARS_PATTERN = re.compile(r"(\d+)\s*\+?\s*years?", re.IGNORECASE)

ONLINE_TERMS = ("remote", "virtual", "online")
HYBRID_TERMS = ("hybrid", "blended")

# Checked in order; the first word found wins.
SENIORITY_TERMS: tuple[tuple[str, ExperienceLevel], ...] = (
    ("principal", ExperienceLevel.EXPERT),
    ("expert", ExperienceLevel.EXPERT),
    ("director", ExperienceLevel.EXPERT),
    ("senior", ExperienceLevel.SENIOR),
    ("lead", ExperienceLevel.SENIOR),
    ("junior", ExperienceLevel.JUNIOR),
    ("graduate", ExperienceLevel.ENTRY),
    ("entry", ExperienceLevel.ENTRY),
)


@dataclass(frozen=True)
class JobPosting:
    """A job posted by a company, as read from the surrounding application."""

    id: str
    title: str
    description: str = ""
    requirements: str = ""
    location: str | None = None
    job_type: str = ""
    sector: str | None = None

    @property
    def text(self) -> str:
        return " ".join(
            part for part in (self.title, self.description, self.requirements, self.job_type) if part
        ).lower()


@dataclass(frozen=True)
class JobMatch:
    """A job scored for one professional."""

    job: JobPosting
    score: float
    match_strength: str
    reasons: tuple[str, ...]
    improvement_hints: tuple[str, ...]


def _contains_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def infer_sector(job: JobPosting, catalog: SectorCatalog) -> str:
    """Explicit sector if set, otherwise the first sector whose keyword occurs in the text.

    Raises:
        UnknownSectorError: If the explicit sector is unknown or nothing matches.
    """
    if job.sector:
        if not catalog.has_sector(job.sector):
            raise UnknownSectorError(job.sector)
        return job.sector
    text = job.text
    for sector in catalog.list_sectors():
        if any(_contains_word(text, keyword.lower()) for keyword in sector.keywords):
            return sector.id
    raise UnknownSectorError(f"<inferred from job {job.id}>")


def infer_format(job: JobPosting) -> TrainingFormat:
    text = f"{job.text} {(job.location or '').lower()}"
    if any(term in text for term in HYBRID_TERMS):
        return TrainingFormat.HYBRID
    if any(term in text for term in ONLINE_TERMS):
        return TrainingFormat.ONLINE
    return TrainingFormat.IN_PERSON


def infer_language(job: JobPosting) -> Language:
    text = job.text
    if "bilingual" in text or ("arabic" in text and "english" in text):
        return Language.BILINGUAL
    if "arabic" in text:
        return Language.ARABIC
    return Language.ENGLISH


def infer_experience(job: JobPosting) -> ExperienceLevel:
    text = job.text
    match = _YEARS_PATTERN.search(text)
    if match:
        return level_for_years(float(match.group(1)))
    for word, level in SENIORITY_TERMS:
        if _contains_word(text, word):
            return level
    return ExperienceLevel.INTERMEDIATE


def requirement_from_job(job: JobPosting, catalog: SectorCatalog) -> Requirement:
    """Build the requirement a job posting implies."""
    location = job.location
    if location and any(term in location.lower() for term in ONLINE_TERMS):
        location = None
    return Requirement(
        sector=infer_sector(job, catalog),
        training_type=job.title.strip() or "general",
        preferred_language=infer_language(job),
        format=infer_format(job),
        experience_level=infer_experience(job),
        location=location,
    )
