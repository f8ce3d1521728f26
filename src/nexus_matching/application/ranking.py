"""Ranking service: validate, shortlist, score in parallel, sort, truncate.

Usage example:
    result = ranking.recommend(
        Requirement(sector="oil-gas", training_type="Safety Training"),
        top_k=5,
    )
    for recommendation in result.recommendations:
        print(recommendation.candidate.name, recommendation.score.overall_score)
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from ..domain.models import Candidate, MatchScore, Recommendation, RecommendationSet, Requirement
from ..domain.ranking import sort_recommendations
from ..domain.scoring import score
from ..domain.taxonomy import Sector
from ..domain.weights import WeightVector
from ..exceptions import ComputationError, DataUnavailableError, ValidationError
from ..observability import get_logger, log_duration
from ..protocols import Clock
from .candidate_index import CandidateIndex
from .taxonomy_store import TaxonomyStore
from .weight_store import WeightStore

logger = get_logger("nexus_matching.ranking")

DEFAULT_TOP_K = 10


class RankingService:
    """Turns a requirement into a ranked ``RecommendationSet``."""

    def __init__(
        self,
        *,
        taxonomy: TaxonomyStore,
        index: CandidateIndex,
        weights: WeightStore,
        clock: Clock,
        scoring_workers: int = 4,
        min_score: float = 0.0,
    ) -> None:
        if scoring_workers < 1:
            raise ValueError("scoring_workers must be at least 1")
        self.taxonomy = taxonomy
        self.index = index
        self.weights = weights
        self.clock = clock
        self.scoring_workers = scoring_workers
        self.min_score = min_score

    def validate_requirement(self, requirement: Requirement, top_k: int = DEFAULT_TOP_K) -> Sector:
        """Check a requirement before it reaches scoring and return its sector.

        Raises:
            UnknownSectorError: If the sector id does not resolve.
            ValidationError: For any other malformed field.
        """
        sector = self.taxonomy.resolve(requirement.sector)
        if not requirement.training_type.strip():
            raise ValidationError("training_type must not be empty.")
        if top_k < 1:
            raise ValidationError(f"top_k must be at least 1, got {top_k}.")
        budget = requirement.budget_per_hour
        if budget is not None and (not math.isfinite(budget) or budget < 0.0):
            raise ValidationError(f"budget_per_hour must be a non-negative number, got {budget}.")
        return sector

    def recommend(
        self,
        requirement: Requirement,
        top_k: int = DEFAULT_TOP_K,
        *,
        min_score: float | None = None,
    ) -> RecommendationSet:
        """Rank candidates for ``requirement``.

        Validation errors propagate; an unavailable index yields an empty,
        degraded set; a candidate that cannot be scored is skipped.
        """
        sector = self.validate_requirement(requirement, top_k)
        threshold = self.min_score if min_score is None else min_score

        try:
            shortlist = self.index.shortlist(requirement)
        except DataUnavailableError as exc:
            logger.error("Returning degraded empty result: %s", exc)
            return self._result(requirement, 0, (), degraded=True)

        if not shortlist:
            return self._result(requirement, 0, ())

        weights = self.weights.current()
        with log_duration(logger, "Scored %d candidates", len(shortlist)):
            scored = self._score_all(requirement, shortlist, weights, sector)

        kept = [item for item in scored if item.score.overall_score >= threshold]
        ordered = sort_recommendations(kept)
        return self._result(requirement, len(ordered), ordered[:top_k])

    def score_candidate(self, requirement: Requirement, candidate: Candidate) -> MatchScore:
        """Score one candidate under the current weights.

        Raises:
            UnknownSectorError: If the requirement sector does not resolve.
            ComputationError: If the candidate record is malformed.
        """
        sector = self.taxonomy.resolve(requirement.sector)
        return score(requirement, candidate, self.weights.current(), sector)

    def _score_all(
        self,
        requirement: Requirement,
        candidates: tuple[Candidate, ...],
        weights: WeightVector,
        sector: Sector,
    ) -> list[Recommendation]:
        def score_one(candidate: Candidate) -> Recommendation | None:
            try:
                return Recommendation(score(requirement, candidate, weights, sector), candidate)
            except ComputationError as exc:
                logger.warning("Skipping candidate: %s", exc)
                return None

        workers = min(self.scoring_workers, len(candidates))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scoring") as pool:
            results = list(pool.map(score_one, candidates))
        return [item for item in results if item is not None]

    def _result(
        self,
        requirement: Requirement,
        total_found: int,
        recommendations: tuple[Recommendation, ...],
        *,
        degraded: bool = False,
    ) -> RecommendationSet:
        generated_at: datetime = self.clock.now()
        return RecommendationSet(
            requirement=requirement,
            total_found=total_found,
            recommendations=recommendations,
            generated_at=generated_at,
            degraded=degraded,
        )
