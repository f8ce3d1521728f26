"""Append-only feedback stores.

Usage example:
    from pathlib import Path

    from nexus_matching.infrastructure.feedback_store import CsvFeedbackStore
    from nexus_matching.infrastructure.filesystem import LocalFileSystem

    store = CsvFeedbackStore(path=Path("data/feedback.csv"), fs=LocalFileSystem())
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, override

import pandas as pd

from ..domain.models import FeedbackRecord
from ..domain.weights import DIMENSIONS
from ..exceptions import DataUnavailableError
from ..protocols import FeedbackStore, FileSystem

FEEDBACK_COLUMNS: tuple[str, ...] = (
    "recorded_at",
    "requirement_signature",
    "candidate_id",
    "booking_success",
    "rating",
    "free_text_feedback",
    *DIMENSIONS,
)


def feedback_row(record: FeedbackRecord, scores: Mapping[str, float] | None) -> dict[str, Any]:
    row: dict[str, Any] = {
        "recorded_at": record.recorded_at.isoformat(),
        "requirement_signature": record.requirement_signature,
        "candidate_id": record.candidate_id,
        "booking_success": record.booking_success,
        "rating": record.rating,
        "free_text_feedback": record.free_text_feedback,
    }
    for name in DIMENSIONS:
        row[name] = None if scores is None else scores.get(name)
    return row


def empty_feedback_frame() -> pd.DataFrame:
    return pd.DataFrame(columns=list(FEEDBACK_COLUMNS))


def filter_since(frame: pd.DataFrame, since: datetime) -> pd.DataFrame:
    """Typed copy of rows recorded at or after ``since``."""
    if frame.empty:
        return empty_feedback_frame()
    typed = frame.copy()
    typed["recorded_at"] = pd.to_datetime(typed["recorded_at"], utc=True, format="ISO8601")
    typed["candidate_id"] = typed["candidate_id"].astype(str)
    typed["booking_success"] = (
        typed["booking_success"].astype(str).str.lower().isin({"true", "1"})
    )
    for column in ("rating", *DIMENSIONS):
        typed[column] = pd.to_numeric(typed[column], errors="coerce")
    selected = typed[typed["recorded_at"] >= pd.Timestamp(since)]
    return selected.reset_index(drop=True)


class CsvFeedbackStore(FeedbackStore):
    """Feedback appended to a CSV file, one row per record."""

    def __init__(self, *, path: Path, fs: FileSystem) -> None:
        self.path = path
        self.fs = fs
        self._lock = threading.Lock()

    @override
    def append(self, record: FeedbackRecord, scores: Mapping[str, float] | None) -> None:
        frame = pd.DataFrame([feedback_row(record, scores)], columns=list(FEEDBACK_COLUMNS))
        with self._lock:
            self.fs.append_csv(frame, self.path)

    @override
    def load_since(self, since: datetime) -> pd.DataFrame:
        with self._lock:
            if not self.fs.exists(self.path):
                return empty_feedback_frame()
            try:
                frame = self.fs.read_csv(self.path)
            except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
                message = f"Feedback log is unreadable: {self.path}: {exc}"
                raise DataUnavailableError(message) from exc
        try:
            return filter_since(frame, since)
        except (KeyError, ValueError) as exc:
            raise DataUnavailableError(f"Feedback log is malformed: {self.path}: {exc}") from exc


class InMemoryFeedbackStore(FeedbackStore):
    """Process-local feedback store used when no log path is configured."""

    def __init__(self) -> None:
        self._rows: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    @override
    def append(self, record: FeedbackRecord, scores: Mapping[str, float] | None) -> None:
        with self._lock:
            self._rows.append(feedback_row(record, scores))

    @override
    def load_since(self, since: datetime) -> pd.DataFrame:
        with self._lock:
            rows = list(self._rows)
        return filter_since(pd.DataFrame(rows, columns=list(FEEDBACK_COLUMNS)), since)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
