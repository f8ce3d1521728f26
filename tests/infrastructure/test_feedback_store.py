"""Tests for the append-only feedback stores."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pandas as pd
import pytest

from nexus_matching.domain.models import FeedbackRecord
from nexus_matching.exceptions import DataUnavailableError
from nexus_matching.infrastructure import CsvFeedbackStore, InMemoryFeedbackStore, LocalFileSystem
from nexus_matching.infrastructure.feedback_store import FEEDBACK_COLUMNS
from tests.fakes import InMemoryFileSystem

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=UTC)

SCORES = {
    "sector": 1.0,
    "language": 0.6,
    "format": 1.0,
    "experience": 0.8,
    "location": 1.0,
    "cultural_fit": 0.5,
}


def _record(candidate_id: str, *, days_ago: int, booked: bool = True) -> FeedbackRecord:
    return FeedbackRecord(
        requirement_signature="sig-1",
        candidate_id=candidate_id,
        booking_success=booked,
        recorded_at=NOW - timedelta(days=days_ago),
        rating=4.0 if booked else None,
    )


def test_csv_store_round_trips_through_local_files(tmp_path: Path) -> None:
    store = CsvFeedbackStore(path=tmp_path / "feedback.csv", fs=LocalFileSystem())
    store.append(_record("p-1", days_ago=1), SCORES)
    store.append(_record("p-2", days_ago=2, booked=False), None)

    frame = store.load_since(NOW - timedelta(days=30))

    assert list(frame.columns) == list(FEEDBACK_COLUMNS)
    assert frame["candidate_id"].tolist() == ["p-1", "p-2"]
    assert frame["booking_success"].tolist() == [True, False]
    assert frame.loc[0, "language"] == 0.6
    assert pd.isna(frame.loc[1, "language"])
    assert pd.isna(frame.loc[1, "rating"])
    assert frame.loc[0, "recorded_at"] == pd.Timestamp(NOW - timedelta(days=1))


def test_csv_store_missing_file_is_empty(in_memory_fs: InMemoryFileSystem) -> None:
    store = CsvFeedbackStore(path=Path("feedback.csv"), fs=in_memory_fs)

    frame = store.load_since(NOW)

    assert frame.empty
    assert list(frame.columns) == list(FEEDBACK_COLUMNS)


def test_load_since_applies_window(in_memory_fs: InMemoryFileSystem) -> None:
    store = CsvFeedbackStore(path=Path("feedback.csv"), fs=in_memory_fs)
    store.append(_record("recent", days_ago=3), SCORES)
    store.append(_record("old", days_ago=45), SCORES)

    frame = store.load_since(NOW - timedelta(days=30))

    assert frame["candidate_id"].tolist() == ["recent"]


def test_in_memory_store_counts_and_filters() -> None:
    store = InMemoryFeedbackStore()
    store.append(_record("p-1", days_ago=1), SCORES)
    store.append(_record("p-2", days_ago=60), SCORES)

    assert len(store) == 2
    assert store.load_since(NOW - timedelta(days=30))["candidate_id"].tolist() == ["p-1"]


def test_unreadable_log_is_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "feedback.csv"
    path.mkdir()
    store = CsvFeedbackStore(path=path, fs=LocalFileSystem())

    with pytest.raises(DataUnavailableError, match="unreadable"):
        store.load_since(NOW)


def test_malformed_timestamps_are_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "feedback.csv"
    row = {column: "" for column in FEEDBACK_COLUMNS}
    row.update(recorded_at="last tuesday", candidate_id="p-1", booking_success="true")
    pd.DataFrame([row], columns=list(FEEDBACK_COLUMNS)).to_csv(path, index=False)
    store = CsvFeedbackStore(path=path, fs=LocalFileSystem())

    with pytest.raises(DataUnavailableError, match="malformed"):
        store.load_since(NOW)
