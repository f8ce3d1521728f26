"""Matching in both directions between job postings and professionals."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..domain.explanations import improvement_hints, match_strength
from ..domain.jobs import JobMatch, JobPosting, requirement_from_job
from ..domain.models import RecommendationSet
from ..exceptions import ComputationError, DataUnavailableError, ValidationError
from ..observability import get_logger
from ..protocols import FileSystem
from .candidate_index import CandidateIndex
from .ranking import DEFAULT_TOP_K, RankingService
from .taxonomy_store import TaxonomyStore

logger = get_logger("nexus_matching.job_matching")


class JobMatcher:
    def __init__(
        self,
        *,
        taxonomy: TaxonomyStore,
        index: CandidateIndex,
        ranking: RankingService,
    ) -> None:
        self.taxonomy = taxonomy
        self.index = index
        self.ranking = ranking

    def professionals_for_job(self, job: JobPosting, top_k: int = DEFAULT_TOP_K) -> RecommendationSet:
        """Rank professionals against the requirement a posting implies.

        Raises:
            UnknownSectorError: If no sector can be inferred for the posting.
        """
        requirement = requirement_from_job(job, self.taxonomy.catalog)
        return self.ranking.recommend(requirement, top_k=top_k)

    def jobs_for_professional(
        self,
        candidate_id: str,
        jobs: Iterable[JobPosting],
        top_k: int = DEFAULT_TOP_K,
    ) -> tuple[JobMatch, ...]:
        """Rank ``jobs`` for one professional, best first.

        Jobs whose requirement cannot be inferred are skipped.

        Raises:
            ValidationError: If ``top_k`` is below 1.
            DataUnavailableError: If the professional is not in the index.
        """
        if top_k < 1:
            raise ValidationError(f"top_k must be at least 1, got {top_k}.")
        candidate = self.index.get(candidate_id)
        if candidate is None:
            raise DataUnavailableError(f"Professional {candidate_id!r} is not in the index")

        matches: list[JobMatch] = []
        for job in jobs:
            try:
                requirement = requirement_from_job(job, self.taxonomy.catalog)
                scored = self.ranking.score_candidate(requirement, candidate)
            except (ValidationError, ComputationError) as exc:
                logger.warning("Skipping job %s: %s", job.id, exc)
                continue
            matches.append(
                JobMatch(
                    job=job,
                    score=scored.overall_score,
                    match_strength=match_strength(scored.overall_score),
                    reasons=scored.reasons,
                    improvement_hints=improvement_hints(scored),
                )
            )
        matches.sort(key=lambda match: (-match.score, match.job.id))
        return tuple(matches[:top_k])


class _JobPostingModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    title: str
    description: str = ""
    requirements: str = ""
    location: str | None = None
    job_type: str = ""
    sector: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("id", "title")
    @classmethod
    def _validate_non_empty(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text


class _JobFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    jobs: tuple[_JobPostingModel, ...]


def load_job_postings(*, path: Path, fs: FileSystem) -> tuple[JobPosting, ...]:
    """Load job postings from a ``{"jobs": [...]}`` JSON file.

    Raises:
        DataUnavailableError: If the file is missing or does not validate.
    """
    if not fs.exists(path):
        raise DataUnavailableError(f"Job postings file not found: {path}")
    try:
        model = _JobFileModel.model_validate_json(fs.read_text(path))
    except PydanticValidationError as exc:
        raise DataUnavailableError(f"Job postings file {path} is invalid: {exc}") from exc
    return tuple(
        JobPosting(
            id=job.id,
            title=job.title,
            description=job.description,
            requirements=job.requirements,
            location=job.location,
            job_type=job.job_type,
            sector=job.sector,
        )
        for job in model.jobs
    )
