"""Bounded, correlation-driven weight adaptation.

The rule is deliberately simple and auditable:

1. Per dimension, take the Pearson correlation between the served dimension
   score and the engagement outcome (zero when either side has no variance).
2. Centre the correlations so the deltas sum to zero.
3. Scale so no component moves by more than ``step``.
4. Shrink the whole delta if any weight would go negative, then renormalise.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

import pandas as pd

from ..exceptions import InsufficientFeedbackError
from .weights import DIMENSIONS, WeightVector

OUTCOME_COLUMN = "outcome"
DEFAULT_WEIGHT_STEP = 0.02


def dimension_correlations(frame: pd.DataFrame) -> dict[str, float]:
    """Pearson correlation of each dimension column with ``outcome``."""
    outcome = frame[OUTCOME_COLUMN].astype(float)
    correlations: dict[str, float] = {}
    for name in DIMENSIONS:
        value = frame[name].astype(float).corr(outcome)
        correlations[name] = 0.0 if value is None or math.isnan(value) else float(value)
    return correlations


def bounded_deltas(correlations: Mapping[str, float], step: float) -> dict[str, float]:
    """Centred deltas scaled so ``max(|delta|) <= step``."""
    values = [correlations.get(name, 0.0) for name in DIMENSIONS]
    mean = math.fsum(values) / len(values)
    centred = [value - mean for value in values]
    scale = max(1.0, max(abs(value) for value in centred))
    return {name: step * value / scale for name, value in zip(DIMENSIONS, centred, strict=True)}


def apply_deltas(current: WeightVector, deltas: Mapping[str, float]) -> WeightVector:
    """Add ``deltas`` to ``current`` without letting any weight go negative."""
    weights = current.as_dict()
    shrink = 1.0
    for name, delta in deltas.items():
        if delta < 0.0 and weights[name] + delta < 0.0:
            shrink = min(shrink, weights[name] / -delta)
    proposed = {name: max(0.0, weights[name] + shrink * deltas[name]) for name in DIMENSIONS}
    return WeightVector.normalised(proposed)


def adapt_weights(
    current: WeightVector,
    frame: pd.DataFrame,
    *,
    step: float = DEFAULT_WEIGHT_STEP,
    min_records: int = 1,
) -> WeightVector:
    """Return the next weight vector for the feedback in ``frame``.

    ``frame`` holds one row per feedback record with a column per dimension
    plus ``outcome``.

    Raises:
        InsufficientFeedbackError: If ``frame`` has fewer than ``min_records`` rows.
    """
    if len(frame) < min_records:
        raise InsufficientFeedbackError(len(frame), min_records)
    correlations = dimension_correlations(frame)
    return apply_deltas(current, bounded_deltas(correlations, step))
