"""Tests for the live weight holder and its JSON persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from nexus_matching.application.weight_store import WeightStore
from nexus_matching.domain.weights import DEFAULT_WEIGHTS, WeightVector
from nexus_matching.exceptions import WeightsFileError
from tests.fakes import InMemoryFileSystem

PATH = Path("data/weights.json")


def test_swap_returns_previous_vector() -> None:
    store = WeightStore()
    replacement = WeightVector(0.25, 0.25, 0.15, 0.15, 0.10, 0.10)

    previous = store.swap(replacement)

    assert previous == DEFAULT_WEIGHTS
    assert store.current() == replacement


def test_save_then_load_restores_vector(in_memory_fs: InMemoryFileSystem) -> None:
    saved = WeightStore(WeightVector(0.32, 0.18, 0.15, 0.15, 0.10, 0.10))
    saved.save(PATH, in_memory_fs, updated_at=datetime(2024, 6, 1, tzinfo=UTC))

    loaded = WeightStore()
    vector = loaded.load(PATH, in_memory_fs)

    assert vector.as_tuple() == pytest.approx((0.32, 0.18, 0.15, 0.15, 0.10, 0.10))
    assert loaded.current() == vector
    assert in_memory_fs.read_json(PATH)["schema_version"] == 1


def test_missing_file_keeps_current_vector(in_memory_fs: InMemoryFileSystem) -> None:
    store = WeightStore()

    assert store.load(PATH, in_memory_fs) == DEFAULT_WEIGHTS


@pytest.mark.parametrize(
    "payload",
    [
        {"schema_version": 2, "weights": DEFAULT_WEIGHTS.as_dict()},
        {"schema_version": 1, "weights": {"sector": 1.0}},
        {"schema_version": 1, "weights": {**DEFAULT_WEIGHTS.as_dict(), "sector": -0.3}},
        {"schema_version": 1, "weights": DEFAULT_WEIGHTS.as_dict(), "extra": True},
    ],
)
def test_invalid_file_raises(in_memory_fs: InMemoryFileSystem, payload: dict[str, object]) -> None:
    in_memory_fs.write_json(payload, PATH)

    with pytest.raises(WeightsFileError):
        WeightStore().load(PATH, in_memory_fs)
