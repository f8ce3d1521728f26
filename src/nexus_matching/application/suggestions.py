"""Live suggestions for a requirement that is still being edited.

Callers poll ``suggest`` on a fixed cadence; every call is independent and
nothing is retained between calls.
"""

from __future__ import annotations

from ..config_file import MAX_SUGGESTIONS
from ..domain.models import Requirement, Suggestion
from .ranking import RankingService

DEFAULT_SUGGESTION_LIMIT = MAX_SUGGESTIONS


class SuggestionStream:
    def __init__(self, *, ranking: RankingService, limit: int = DEFAULT_SUGGESTION_LIMIT) -> None:
        if not 1 <= limit <= MAX_SUGGESTIONS:
            raise ValueError(f"limit must be between 1 and {MAX_SUGGESTIONS}, got {limit}")
        self.ranking = ranking
        self.limit = limit

    def suggest(self, partial_requirement: Requirement) -> tuple[Suggestion, ...]:
        """Top ``limit`` lightweight suggestions for ``partial_requirement``."""
        result = self.ranking.recommend(partial_requirement, top_k=self.limit)
        return tuple(
            Suggestion(
                candidate_id=item.candidate.id,
                name=item.candidate.name,
                title=item.candidate.title,
                score=item.score.overall_score,
            )
            for item in result.recommendations
        )
