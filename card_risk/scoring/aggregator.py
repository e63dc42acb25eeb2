"""
Score aggregation, rating classification and recommendation.

Rating bands
------------
    [0, 20)   solid_investment
    [20, 40)  acceptable
    [40, 60)  moderate_speculation
    [60, 80)  high_speculation
    [80, 100] mania

The bands are checked at import time to cover 0–100 without gaps or
overlaps, so every integer total maps to exactly one rating.

Recommendation
--------------
    total < 30        BUY
    30 <= total < 40  BUY for vintage cards, HOLD otherwise
    40 <= total < 60  HOLD
    60 <= total < 80  SELL
    total >= 80       AVOID

Vintage cards get BUY only in the 30–39 band. An earlier rule gave them BUY
for any total under 50; totals of 40–49 now read HOLD for every card so the
recommendation follows the table above and agrees with the
moderate_speculation rating.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from card_risk.errors import ConfigurationError
from card_risk.models.score import DimensionScore
from card_risk.scoring.weights import DIMENSION_WEIGHTS
from card_risk.taxonomy.rating_taxonomy import Dimension, Rating, Recommendation

# (lower bound inclusive, upper bound exclusive, rating); last band is closed.
RATING_BANDS: list[tuple[int, int, Rating]] = [
    (0,  20,  Rating.SOLID_INVESTMENT),
    (20, 40,  Rating.ACCEPTABLE),
    (40, 60,  Rating.MODERATE_SPECULATION),
    (60, 80,  Rating.HIGH_SPECULATION),
    (80, 101, Rating.MANIA),
]

_SUMMARIES: dict[Rating, str] = {
    Rating.SOLID_INVESTMENT: (
        "{name} shows the profile of a solid investment: low volatility and "
        "stable fundamentals."
    ),
    Rating.ACCEPTABLE: (
        "{name} is an acceptable investment with a few volatility signals "
        "worth watching."
    ),
    Rating.MODERATE_SPECULATION: (
        "{name} shows signs of moderate speculation. Proceed with caution."
    ),
    Rating.HIGH_SPECULATION: (
        "{name} is in speculative territory. The risk of a correction is high."
    ),
    Rating.MANIA: (
        "DANGER: {name} shows every signal of a speculative bubble. Avoid or sell."
    ),
}


def validate_bands(bands: Sequence[tuple[int, int, Rating]]) -> None:
    """Raise ``ConfigurationError`` unless ``bands`` tile [0, 100] exactly."""
    if not bands:
        raise ConfigurationError("Rating bands must not be empty.")
    if bands[0][0] != 0:
        raise ConfigurationError("Rating bands must start at 0.")
    for (_, hi, _), (lo, _, _) in zip(bands, bands[1:]):
        if hi != lo:
            raise ConfigurationError(f"Rating bands leave a gap or overlap at {hi}/{lo}.")
    if any(lo >= hi for lo, hi, _ in bands):
        raise ConfigurationError("Each rating band must be non-empty.")
    if bands[-1][1] <= 100:
        raise ConfigurationError("Rating bands must cover a total of 100.")
    if {r for _, _, r in bands} != set(Rating):
        raise ConfigurationError("Every rating must have exactly one band.")


validate_bands(RATING_BANDS)


def aggregate(dimensions: Iterable[DimensionScore]) -> int:
    """Weighted total of the dimension scores, rounded and clamped to [0, 100].

    Weights come from ``DIMENSION_WEIGHTS``; the weight stored on each
    ``DimensionScore`` is informational only.

    Raises:
        ValueError: If a dimension is missing or repeated.
    """
    by_dimension: dict[Dimension, DimensionScore] = {}
    for dim_score in dimensions:
        if dim_score.dimension in by_dimension:
            raise ValueError(f"Duplicate dimension score: {dim_score.dimension}.")
        by_dimension[dim_score.dimension] = dim_score

    missing = set(Dimension) - set(by_dimension)
    if missing:
        raise ValueError(f"Missing dimension scores: {sorted(d.value for d in missing)}.")

    total = math.fsum(DIMENSION_WEIGHTS[d] * by_dimension[d].score for d in Dimension)
    return max(0, min(100, round_half_up(total)))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round()`` rounds to even)."""
    return int(math.floor(value + 0.5 + 1e-9))


def classify(total: int) -> Rating:
    """Map a 0–100 total to its rating band."""
    clamped = max(0, min(100, total))
    for lo, hi, rating in RATING_BANDS:
        if lo <= clamped < hi:
            return rating
    # Unreachable once validate_bands() has passed.
    raise ValueError(f"No rating band for total {total}.")


def recommend(total: int, is_vintage: bool) -> Recommendation:
    if total < 30:
        return Recommendation.BUY
    if total < 40:
        return Recommendation.BUY if is_vintage else Recommendation.HOLD
    if total < 60:
        return Recommendation.HOLD
    if total < 80:
        return Recommendation.SELL
    return Recommendation.AVOID


def build_summary(
    card_name: str,
    rating: Rating,
    degraded: Sequence[Dimension] = (),
) -> str:
    """One-sentence assessment, plus a note when defaults were used."""
    summary = _SUMMARIES[rating].format(name=card_name or "This card")
    if degraded:
        names = ", ".join(d.value for d in degraded)
        summary += f" Scored with default values for: {names}."
    return summary
