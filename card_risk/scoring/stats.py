"""
Statistical primitives shared by the dimension scorers.

Every function returns a defined number for degenerate input (empty series,
zero mean, zero variance) instead of raising or returning NaN. The scorers
rely on this: insufficient data is a scoring case, not an error.

Variance is the population variance (divide by ``n``), matching how the
price-series sanitizer measures outliers.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence


def positive_prices(values: Iterable[Optional[float]]) -> list[float]:
    """Drop ``None``, NaN, infinite and non-positive values."""
    return [
        v for v in values
        if v is not None and not math.isnan(v) and not math.isinf(v) and v > 0
    ]


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    mu = mean(values)
    variance = math.fsum((v - mu) ** 2 for v in values) / len(values)
    return math.sqrt(max(0.0, variance))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """``std / mean × 100``; 0.0 for fewer than two values or a zero mean."""
    if len(values) < 2:
        return 0.0
    mu = mean(values)
    if mu == 0:
        return 0.0
    return population_std(values) / mu * 100.0


def peak_to_trough(values: Sequence[float]) -> float:
    """``(max − min) / min × 100``; 0.0 for fewer than two values or min <= 0."""
    if len(values) < 2:
        return 0.0
    lo = min(values)
    if lo <= 0:
        return 0.0
    return (max(values) - lo) / lo * 100.0


def daily_returns(values: Sequence[float]) -> list[float]:
    """Simple returns ``p[i] / p[i-1] − 1``; pairs with a non-positive
    previous price are skipped."""
    return [
        cur / prev - 1.0
        for prev, cur in zip(values, values[1:])
        if prev > 0
    ]


def pearson_correlation(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson correlation coefficient.

    Returns 0.0 when the sequences differ in length, have fewer than three
    values, or either has zero variance (correlation undefined).
    """
    n = len(xs)
    if n != len(ys) or n < 3:
        return 0.0

    mean_x = mean(xs)
    mean_y = mean(ys)

    numerator = 0.0
    denom_x = 0.0
    denom_y = 0.0
    for x, y in zip(xs, ys):
        dx = x - mean_x
        dy = y - mean_y
        numerator += dx * dy
        denom_x += dx * dx
        denom_y += dy * dy

    denom = math.sqrt(denom_x * denom_y)
    if denom == 0:
        return 0.0
    # Clamp floating-point drift so |r| never exceeds 1.
    return max(-1.0, min(1.0, numerator / denom))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
