"""Tests for inferring a requirement from a job posting."""

from typing import Any

import pytest

from nexus_matching.domain.jobs import (
    JobPosting,
    infer_experience,
    infer_format,
    infer_language,
    infer_sector,
    requirement_from_job,
)
from nexus_matching.domain.models import ExperienceLevel, Language, TrainingFormat
from nexus_matching.domain.taxonomy import DEFAULT_SECTOR_CATALOG
from nexus_matching.exceptions import UnknownSectorError, ValidationError


def _job(**overrides: Any) -> JobPosting:
    values: dict[str, Any] = {
        "id": "job-1",
        "title": "Senior HSE Trainer",
        "description": "Deliver drilling safety courses in Arabic and English.",
        "requirements": "10+ years experience",
        "location": "Abu Dhabi",
        "job_type": "contract",
    }
    values.update(overrides)
    return JobPosting(**values)


def test_requirement_from_job_infers_every_field() -> None:
    requirement = requirement_from_job(_job(), DEFAULT_SECTOR_CATALOG)

    assert requirement.sector == "oil-gas"
    assert requirement.training_type == "Senior HSE Trainer"
    assert requirement.preferred_language is Language.BILINGUAL
    assert requirement.format is TrainingFormat.IN_PERSON
    assert requirement.experience_level is ExperienceLevel.SENIOR
    assert requirement.location == "Abu Dhabi"


def test_explicit_sector_wins_over_keywords() -> None:
    assert infer_sector(_job(sector="education"), DEFAULT_SECTOR_CATALOG) == "education"


def test_unknown_explicit_sector_is_a_validation_error() -> None:
    with pytest.raises(ValidationError):
        infer_sector(_job(sector="space-mining"), DEFAULT_SECTOR_CATALOG)


def test_sector_keywords_match_whole_words_only() -> None:
    job = _job(
        title="Coach",
        description="Goals and gassy jokes",
        requirements="",
        job_type="",
    )

    with pytest.raises(UnknownSectorError):
        infer_sector(job, DEFAULT_SECTOR_CATALOG)


@pytest.mark.parametrize(
    ("description", "location", "expected"),
    [
        ("Blended programme", "Dubai", TrainingFormat.HYBRID),
        ("Hybrid delivery, some remote sessions", "Dubai", TrainingFormat.HYBRID),
        ("Virtual classroom", "Dubai", TrainingFormat.ONLINE),
        ("On site", "Remote", TrainingFormat.ONLINE),
        ("On site", "Dubai", TrainingFormat.IN_PERSON),
    ],
)
def test_infer_format(description: str, location: str, expected: TrainingFormat) -> None:
    assert infer_format(_job(description=description, location=location)) is expected


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Bilingual delivery", Language.BILINGUAL),
        ("Arabic speakers preferred", Language.ARABIC),
        ("Courses in English", Language.ENGLISH),
    ],
)
def test_infer_language(description: str, expected: Language) -> None:
    assert infer_language(_job(description=description)) is expected


@pytest.mark.parametrize(
    ("title", "requirements", "expected"),
    [
        ("Trainer", "3 years experience", ExperienceLevel.JUNIOR),
        ("Principal Trainer", "", ExperienceLevel.EXPERT),
        ("Graduate Trainer", "", ExperienceLevel.ENTRY),
        ("Trainer", "", ExperienceLevel.INTERMEDIATE),
    ],
)
def test_infer_experience(title: str, requirements: str, expected: ExperienceLevel) -> None:
    assert infer_experience(_job(title=title, requirements=requirements)) is expected


def test_remote_location_is_dropped_from_requirement() -> None:
    requirement = requirement_from_job(_job(location="Remote"), DEFAULT_SECTOR_CATALOG)

    assert requirement.location is None
    assert requirement.format is TrainingFormat.ONLINE
