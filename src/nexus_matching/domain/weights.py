"""Per-dimension weight vector used to aggregate match scores."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

DIMENSIONS: tuple[str, ...] = (
    "sector",
    "language",
    "format",
    "experience",
    "location",
    "cultural_fit",
)

WEIGHT_SUM_TOLERANCE = 1e-9


class InvalidWeightVectorError(ValueError):
    """Raised when weights are negative or do not sum to 1.0."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid weight vector: {detail}")


@dataclass(frozen=True)
class WeightVector:
    """Non-negative dimension weights summing to 1.0."""

    sector: float = 0.30
    language: float = 0.20
    format: float = 0.15
    experience: float = 0.15
    location: float = 0.10
    cultural_fit: float = 0.10

    def __post_init__(self) -> None:
        values = self.as_tuple()
        if any(not math.isfinite(value) or value < 0.0 for value in values):
            raise InvalidWeightVectorError("components must be finite and non-negative")
        total = math.fsum(values)
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise InvalidWeightVectorError(f"components sum to {total!r}, expected 1.0")

    def as_tuple(self) -> tuple[float, ...]:
        return (
            self.sector,
            self.language,
            self.format,
            self.experience,
            self.location,
            self.cultural_fit,
        )

    def as_dict(self) -> dict[str, float]:
        return dict(zip(DIMENSIONS, self.as_tuple(), strict=True))

    @classmethod
    def normalised(cls, values: Mapping[str, float]) -> WeightVector:
        """Build a vector from arbitrary non-negative values, scaled to sum to 1.0.

        Raises:
            InvalidWeightVectorError: If a dimension is missing, unknown, negative,
                or every value is zero.
        """
        unknown = set(values) - set(DIMENSIONS)
        if unknown:
            raise InvalidWeightVectorError(f"unknown dimensions {sorted(unknown)}")
        missing = [name for name in DIMENSIONS if name not in values]
        if missing:
            raise InvalidWeightVectorError(f"missing dimensions {missing}")
        raw = [float(values[name]) for name in DIMENSIONS]
        if any(not math.isfinite(value) or value < 0.0 for value in raw):
            raise InvalidWeightVectorError("components must be finite and non-negative")
        total = math.fsum(raw)
        if total <= 0.0:
            raise InvalidWeightVectorError("at least one component must be positive")
        scaled = [value / total for value in raw]
        # Fold rounding drift into the largest component so the sum is exact.
        drift = 1.0 - math.fsum(scaled)
        largest = max(range(len(scaled)), key=lambda index: scaled[index])
        scaled[largest] = max(0.0, scaled[largest] + drift)
        return cls(**dict(zip(DIMENSIONS, scaled, strict=True)))


DEFAULT_WEIGHTS = WeightVector()
