"""
Fixed dimension weights.

The weights are constants, not configuration. They are checked once at
import time; a set that does not sum to 1.0 is a programmer error and stops
the process before any card is scored.
"""

from __future__ import annotations

import math

from card_risk.errors import ConfigurationError
from card_risk.taxonomy.rating_taxonomy import Dimension

DIMENSION_WEIGHTS: dict[Dimension, float] = {
    Dimension.VOLATILITY: 0.25,
    Dimension.GROWTH:     0.25,
    Dimension.SCARCITY:   0.20,
    Dimension.SENTIMENT:  0.15,
    Dimension.MACRO:      0.15,
}

_WEIGHT_TOLERANCE = 1e-9


def validate_weights(weights: dict[Dimension, float]) -> None:
    """Raise ``ConfigurationError`` unless ``weights`` covers every dimension
    with non-negative values summing to 1.0."""
    missing = set(Dimension) - set(weights)
    if missing:
        raise ConfigurationError(
            f"Missing weights for dimensions: {sorted(d.value for d in missing)}."
        )
    if any(w < 0 for w in weights.values()):
        raise ConfigurationError("Dimension weights must be non-negative.")
    total = math.fsum(weights.values())
    if abs(total - 1.0) > _WEIGHT_TOLERANCE:
        raise ConfigurationError(f"Dimension weights must sum to 1.0, got {total}.")


def weight_of(dimension: Dimension) -> float:
    return DIMENSION_WEIGHTS[dimension]


validate_weights(DIMENSION_WEIGHTS)
