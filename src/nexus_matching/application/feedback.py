"""Feedback collection and the periodic weight-adjustment pass.

Recording is append-only and only fails on malformed input. Adjustment runs
on its own cadence, reads the feedback window, and publishes a new weight
vector through the ``WeightStore``; a cycle without enough data keeps the
previous vector.
"""

from __future__ import annotations

import math
import threading
from collections import OrderedDict
from datetime import UTC, timedelta
from pathlib import Path

import pandas as pd

from ..domain.adaptation import DEFAULT_WEIGHT_STEP, OUTCOME_COLUMN, adapt_weights
from ..domain.models import FeedbackAck, FeedbackRecord, RecommendationSet
from ..domain.weights import DIMENSIONS, WeightVector
from ..exceptions import InsufficientFeedbackError, MalformedFeedbackError
from ..observability import get_logger
from ..protocols import Clock, FeedbackStore, FileSystem
from .weight_store import WeightStore

logger = get_logger("nexus_matching.feedback")

DEFAULT_MIN_FEEDBACK_RECORDS = 20
DEFAULT_FEEDBACK_WINDOW = timedelta(days=30)
DEFAULT_LEDGER_SIZE = 10_000
MAX_RATING = 5.0


def outcome_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Rows with known dimension scores, plus an ``outcome`` column in 0..1.

    Outcome is booking success, blended 50/50 with ``rating / 5`` when rated.
    """
    scored = frame.dropna(subset=list(DIMENSIONS)).copy()
    booked = scored["booking_success"].astype(float)
    rating = pd.to_numeric(scored["rating"], errors="coerce")
    scored[OUTCOME_COLUMN] = booked.where(rating.isna(), 0.5 * booked + 0.5 * rating / MAX_RATING)
    return scored.reset_index(drop=True)


class FeedbackCollector:
    """Records engagement outcomes and adapts weights from them."""

    def __init__(
        self,
        *,
        store: FeedbackStore,
        weights: WeightStore,
        clock: Clock,
        fs: FileSystem | None = None,
        weights_path: Path | None = None,
        weight_step: float = DEFAULT_WEIGHT_STEP,
        min_feedback_records: int = DEFAULT_MIN_FEEDBACK_RECORDS,
        window: timedelta = DEFAULT_FEEDBACK_WINDOW,
        ledger_size: int = DEFAULT_LEDGER_SIZE,
    ) -> None:
        if weights_path is not None and fs is None:
            raise ValueError("fs is required when weights_path is set")
        self.store = store
        self.weights = weights
        self.clock = clock
        self.fs = fs
        self.weights_path = weights_path
        self.weight_step = weight_step
        self.min_feedback_records = min_feedback_records
        self.window = window
        self.ledger_size = ledger_size
        self._served: OrderedDict[tuple[str, str], dict[str, float]] = OrderedDict()
        self._ledger_lock = threading.Lock()

    def observe(self, recommendation_set: RecommendationSet) -> None:
        """Remember the dimension scores served for each recommended candidate."""
        signature = recommendation_set.signature
        with self._ledger_lock:
            for item in recommendation_set.recommendations:
                key = (signature, item.candidate.id)
                self._served[key] = item.score.dimensions()
                self._served.move_to_end(key)
            while len(self._served) > self.ledger_size:
                self._served.popitem(last=False)

    def served_scores(self, requirement_signature: str, candidate_id: str) -> dict[str, float] | None:
        with self._ledger_lock:
            scores = self._served.get((requirement_signature, candidate_id))
        return None if scores is None else dict(scores)

    def record(self, feedback: FeedbackRecord) -> FeedbackAck:
        """Validate and append one feedback record.

        Raises:
            MalformedFeedbackError: If ids are blank or the rating is out of range.
        """
        if not feedback.requirement_signature.strip():
            raise MalformedFeedbackError("requirement signature is required")
        if not feedback.candidate_id.strip():
            raise MalformedFeedbackError("candidate id is required")
        rating = feedback.rating
        if rating is not None and (not math.isfinite(rating) or not 0.0 <= rating <= MAX_RATING):
            raise MalformedFeedbackError(f"rating must be between 0 and 5, got {rating}")
        if feedback.recorded_at.tzinfo is None:
            raise MalformedFeedbackError("recorded_at must be timezone-aware")

        scores = self.served_scores(feedback.requirement_signature, feedback.candidate_id)
        self.store.append(feedback, scores)
        if scores is None:
            logger.info(
                "Feedback for %s stored without served scores; excluded from adaptation",
                feedback.candidate_id,
            )
        return FeedbackAck(
            requirement_signature=feedback.requirement_signature,
            candidate_id=feedback.candidate_id,
            recorded_at=feedback.recorded_at,
            scores_attached=scores is not None,
        )

    def adjust_weights(self, window: timedelta | None = None) -> WeightVector:
        """Run one adaptation cycle over ``window`` and return the live vector."""
        current = self.weights.current()
        now = self.clock.now().astimezone(UTC)
        frame = outcome_frame(self.store.load_since(now - (window or self.window)))
        try:
            proposed = adapt_weights(
                current,
                frame,
                step=self.weight_step,
                min_records=self.min_feedback_records,
            )
        except InsufficientFeedbackError as exc:
            logger.info("Skipping weight adjustment: %s", exc)
            return current

        self.weights.swap(proposed)
        if self.weights_path is not None and self.fs is not None:
            self.weights.save(self.weights_path, self.fs, updated_at=now)
        logger.info(
            "Weights adjusted from %d feedback records: %s",
            len(frame),
            ", ".join(f"{name}={value:.4f}" for name, value in proposed.as_dict().items()),
        )
        return proposed
