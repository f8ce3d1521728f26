"""Copy-and-swap holder for the live weight vector, with JSON persistence.

Weights file format:

    {"schema_version": 1, "updated_at": "2024-05-01T12:00:00+00:00",
     "weights": {"sector": 0.3, "language": 0.2, ...}}
"""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..domain.weights import DEFAULT_WEIGHTS, DIMENSIONS, InvalidWeightVectorError, WeightVector
from ..exceptions import WeightsFileError
from ..observability import get_logger
from ..protocols import FileSystem

logger = get_logger("nexus_matching.weights")

_SCHEMA_VERSION = 1


class _WeightsFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    updated_at: datetime | None = None
    weights: dict[str, float]

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value

    @field_validator("weights")
    @classmethod
    def _validate_dimensions(cls, value: dict[str, float]) -> dict[str, float]:
        if set(value) != set(DIMENSIONS):
            raise ValueError(f"weights must name exactly {', '.join(DIMENSIONS)}")
        return value


class WeightStore:
    """Holds the current ``WeightVector``.

    Readers call ``current()`` once per ranking pass and use that snapshot
    throughout; writers publish a whole new vector with ``swap()``.
    """

    def __init__(self, initial: WeightVector = DEFAULT_WEIGHTS) -> None:
        self._current = initial
        self._write_lock = threading.Lock()

    def current(self) -> WeightVector:
        return self._current

    def swap(self, vector: WeightVector) -> WeightVector:
        """Publish ``vector`` and return the one it replaced."""
        with self._write_lock:
            previous = self._current
            self._current = vector
        return previous

    def load(self, path: Path, fs: FileSystem) -> WeightVector:
        """Replace the current vector with the one stored at ``path``.

        A missing file leaves the current vector in place.

        Raises:
            WeightsFileError: If the file exists but is invalid.
        """
        if not fs.exists(path):
            logger.info("No weights file at %s; using current weights", path)
            return self._current
        try:
            model = _WeightsFileModel.model_validate(fs.read_json(path))
            vector = WeightVector.normalised(model.weights)
        except (json.JSONDecodeError, ValidationError, InvalidWeightVectorError) as exc:
            raise WeightsFileError(str(path), str(exc)) from exc
        self.swap(vector)
        return vector

    def save(self, path: Path, fs: FileSystem, *, updated_at: datetime) -> None:
        vector = self._current
        fs.write_json(
            {
                "schema_version": _SCHEMA_VERSION,
                "updated_at": updated_at.isoformat(),
                "weights": vector.as_dict(),
            },
            path,
        )
