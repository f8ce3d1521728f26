"""Facade wiring every matching component behind one object.

Usage example:
    engine = MatchingEngine(
        taxonomy=TaxonomyStore(),
        index=index,
        weights=WeightStore(),
        feedback_store=InMemoryFeedbackStore(),
        clock=SystemClock(),
    )
    engine.start()
    result = engine.recommend(requirement)
    engine.record_feedback({"candidateId": "p-1", "bookingSuccess": True})
    engine.stop()
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from datetime import timedelta
from pathlib import Path
from typing import Any, Self

from ..config import MatchingConfig
from ..domain.jobs import JobMatch, JobPosting
from ..domain.models import FeedbackAck, RecommendationSet, Requirement, Suggestion
from ..domain.taxonomy import Sector
from ..domain.weights import WeightVector
from ..infrastructure.periodic import PeriodicTask
from ..observability import get_logger
from ..protocols import Clock, FeedbackStore, FileSystem, ProfileStore
from .candidate_index import CandidateIndex
from .feedback import DEFAULT_FEEDBACK_WINDOW, DEFAULT_MIN_FEEDBACK_RECORDS, FeedbackCollector
from .job_matching import JobMatcher
from .payloads import parse_feedback_submission
from .ranking import DEFAULT_TOP_K, RankingService
from .suggestions import DEFAULT_SUGGESTION_LIMIT, SuggestionStream
from .taxonomy_store import TaxonomyStore
from .weight_store import WeightStore

logger = get_logger("nexus_matching.engine")


class MatchingEngine:
    """Entry point used by the CLI and by embedding applications."""

    def __init__(
        self,
        *,
        taxonomy: TaxonomyStore,
        index: CandidateIndex,
        weights: WeightStore,
        feedback_store: FeedbackStore,
        clock: Clock,
        fs: FileSystem | None = None,
        weights_path: Path | None = None,
        scoring_workers: int = 4,
        default_top_k: int = DEFAULT_TOP_K,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
        min_score: float = 0.0,
        weight_step: float = 0.02,
        min_feedback_records: int = DEFAULT_MIN_FEEDBACK_RECORDS,
        feedback_window: timedelta = DEFAULT_FEEDBACK_WINDOW,
        index_refresh_seconds: float = 300.0,
        weight_adjust_seconds: float = 3600.0,
    ) -> None:
        self.taxonomy = taxonomy
        self.index = index
        self.weights = weights
        self.clock = clock
        self.default_top_k = default_top_k
        self.ranking = RankingService(
            taxonomy=taxonomy,
            index=index,
            weights=weights,
            clock=clock,
            scoring_workers=scoring_workers,
            min_score=min_score,
        )
        self.suggestions = SuggestionStream(ranking=self.ranking, limit=suggestion_limit)
        self.feedback = FeedbackCollector(
            store=feedback_store,
            weights=weights,
            clock=clock,
            fs=fs,
            weights_path=weights_path,
            weight_step=weight_step,
            min_feedback_records=min_feedback_records,
            window=feedback_window,
        )
        self.jobs = JobMatcher(taxonomy=taxonomy, index=index, ranking=self.ranking)
        self._refresh_task = PeriodicTask(
            "index-refresh",
            interval_seconds=index_refresh_seconds,
            action=index.refresh,
            run_immediately=True,
        )
        self._adjust_task = PeriodicTask(
            "weight-adjustment",
            interval_seconds=weight_adjust_seconds,
            action=self.feedback.adjust_weights,
        )
        index.bind_refresher(self._refresh_task.trigger)
        self._last_signature: str | None = None
        self._context_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: MatchingConfig,
        *,
        profile_store: ProfileStore,
        feedback_store: FeedbackStore,
        fs: FileSystem,
        clock: Clock,
    ) -> Self:
        """Wire an engine from configuration, loading persisted weights if present.

        Raises:
            SectorCatalogFileNotFoundError: If a configured catalogue is missing.
            SectorCatalogValidationError: If a configured catalogue is invalid.
            WeightsFileError: If a persisted weights file is invalid.
        """
        weights = WeightStore()
        weights_path = Path(config.weights_path) if config.weights_path else None
        if weights_path is not None:
            weights.load(weights_path, fs)
        index = CandidateIndex(
            store=profile_store,
            clock=clock,
            max_shortlist=config.max_shortlist,
            max_staleness_seconds=config.index_max_staleness_seconds,
        )
        return cls(
            taxonomy=TaxonomyStore.from_path(config.sector_catalog_path, fs),
            index=index,
            weights=weights,
            feedback_store=feedback_store,
            clock=clock,
            fs=fs,
            weights_path=weights_path,
            scoring_workers=config.resolved_scoring_workers(),
            default_top_k=config.default_top_k,
            suggestion_limit=config.suggestion_limit,
            min_score=config.min_score,
            weight_step=config.weight_step,
            min_feedback_records=config.min_feedback_records,
            feedback_window=timedelta(days=config.feedback_window_days),
            index_refresh_seconds=config.index_refresh_seconds,
            weight_adjust_seconds=config.weight_adjust_seconds,
        )

    @property
    def last_requirement_signature(self) -> str | None:
        return self._last_signature

    def start(self) -> None:
        """Start background index refresh and weight adjustment."""
        self._refresh_task.start()
        self._adjust_task.start()
        logger.info("Matching engine background tasks started")

    def stop(self) -> None:
        self._refresh_task.stop()
        self._adjust_task.stop()

    def _top_k(self, top_k: int | None) -> int:
        return self.default_top_k if top_k is None else top_k

    def list_sectors(self) -> tuple[Sector, ...]:
        return self.taxonomy.list_sectors()

    def recommend(self, requirement: Requirement, top_k: int | None = None) -> RecommendationSet:
        result = self.ranking.recommend(requirement, top_k=self._top_k(top_k))
        self.feedback.observe(result)
        with self._context_lock:
            self._last_signature = result.signature
        return result

    def suggest(self, partial_requirement: Requirement) -> tuple[Suggestion, ...]:
        return self.suggestions.suggest(partial_requirement)

    def record_feedback(self, payload: Mapping[str, Any]) -> FeedbackAck:
        """Record a feedback submission, defaulting to the most recent search context.

        Raises:
            MalformedFeedbackError: If the payload cannot be recorded.
        """
        with self._context_lock:
            signature = self._last_signature
        record = parse_feedback_submission(
            payload, recorded_at=self.clock.now(), requirement_signature=signature
        )
        return self.feedback.record(record)

    def adjust_weights(self, window: timedelta | None = None) -> WeightVector:
        return self.feedback.adjust_weights(window)

    def current_weights(self) -> WeightVector:
        return self.weights.current()

    def professionals_for_job(self, job: JobPosting, top_k: int | None = None) -> RecommendationSet:
        result = self.jobs.professionals_for_job(job, top_k=self._top_k(top_k))
        self.feedback.observe(result)
        return result

    def jobs_for_professional(
        self, candidate_id: str, jobs: Iterable[JobPosting], top_k: int | None = None
    ) -> tuple[JobMatch, ...]:
        return self.jobs.jobs_for_professional(candidate_id, jobs, top_k=self._top_k(top_k))
