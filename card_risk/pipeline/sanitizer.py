"""
Price-series sanitizer — turns raw observations into a well-formed daily series.

Processing steps:
  1. Drop observations with a missing, NaN, infinite, zero or negative price.
  2. Deduplicate same-date entries, keeping the one with the latest
     ``recorded_at``. Ties, or entries without ``recorded_at``, resolve to the
     one that appears last in the input.
  3. Sort ascending by date.
  4. Flag outliers: ``|price − mean| > outlier_sigma × σ`` (population σ over
     the observed points; needs at least 3). Outliers are kept.
  5. Fill gaps longer than ``max_gap_days`` with one linearly interpolated
     point per missing day, flagged ``is_interpolated``.

With the default config, two points five days apart at 100 and 150 get four
interpolated points in between: 110, 120, 130, 140.

A single call handles one card. Feeds carrying several cards go through
``sanitize_by_card()``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from card_risk.config import SanitizerConfig
from card_risk.models.price import RawPricePoint, SanitizedPricePoint, SanitizedSeries
from card_risk.scoring.stats import mean, population_std

logger = logging.getLogger(__name__)

MIN_POINTS_FOR_OUTLIERS = 3


def _recorded_key(recorded_at: Optional[datetime]) -> Optional[datetime]:
    """Make naive timestamps comparable with aware ones (naive = UTC)."""
    if recorded_at is None:
        return None
    if recorded_at.tzinfo is None:
        return recorded_at.replace(tzinfo=timezone.utc)
    return recorded_at


def _supersedes(new: RawPricePoint, current: RawPricePoint) -> bool:
    new_key = _recorded_key(new.recorded_at)
    current_key = _recorded_key(current.recorded_at)
    if new_key is None:
        return current_key is None
    if current_key is None:
        return True
    return new_key >= current_key


def _flag_outliers(prices: list[float], sigma: float) -> list[bool]:
    if len(prices) < MIN_POINTS_FOR_OUTLIERS:
        return [False] * len(prices)
    mu = mean(prices)
    std = population_std(prices)
    if std == 0:
        return [False] * len(prices)
    return [abs(p - mu) > sigma * std for p in prices]


def _interpolate_gap(
    start: date,
    start_price: float,
    end: date,
    end_price: float,
) -> list[SanitizedPricePoint]:
    span = (end - start).days
    step = (end_price - start_price) / span
    return [
        SanitizedPricePoint(
            date=start + timedelta(days=offset),
            price=start_price + step * offset,
            is_interpolated=True,
        )
        for offset in range(1, span)
    ]


def sanitize_price_series(
    raw: Iterable[RawPricePoint],
    config: Optional[SanitizerConfig] = None,
) -> SanitizedSeries:
    """Clean one card's raw price observations.

    Args:
        raw: Observations in any order, possibly duplicated or invalid.
        config: Outlier and gap thresholds. Defaults to ``SanitizerConfig()``.

    Returns:
        ``SanitizedSeries`` ascending by date with one point per date.

    Raises:
        ValueError: If the observations carry more than one distinct
            ``card_id`` (use ``sanitize_by_card()`` for mixed feeds).
    """
    config = config or SanitizerConfig()
    observations = list(raw)

    card_ids = {p.card_id for p in observations if p.card_id is not None}
    if len(card_ids) > 1:
        raise ValueError(
            f"sanitize_price_series() got {len(card_ids)} card_ids; "
            "use sanitize_by_card() for multi-card feeds."
        )

    valid = [p for p in observations if p.is_valid]
    invalid_dropped = len(observations) - len(valid)

    latest: dict[date, RawPricePoint] = {}
    for point in valid:
        current = latest.get(point.date)
        if current is None or _supersedes(point, current):
            latest[point.date] = point
    duplicates_removed = len(valid) - len(latest)

    ordered = [latest[d] for d in sorted(latest)]
    prices = [float(p.price) for p in ordered]
    outliers = _flag_outliers(prices, config.outlier_sigma)

    points: list[SanitizedPricePoint] = []
    for i, (obs, price, is_outlier) in enumerate(zip(ordered, prices, outliers)):
        if i > 0:
            prev = ordered[i - 1]
            if (obs.date - prev.date).days > config.max_gap_days:
                points.extend(_interpolate_gap(prev.date, prices[i - 1], obs.date, price))
        points.append(SanitizedPricePoint(date=obs.date, price=price, is_outlier=is_outlier))

    result = SanitizedSeries(
        points=points,
        duplicates_removed=duplicates_removed,
        invalid_dropped=invalid_dropped,
    )
    if invalid_dropped or duplicates_removed or result.outlier_count:
        logger.debug(
            "Sanitized %d observations: %d invalid, %d duplicates, %d outliers, %d interpolated",
            len(observations), invalid_dropped, duplicates_removed,
            result.outlier_count, result.interpolated_count,
        )
    return result


def sanitize_by_card(
    raw: Iterable[RawPricePoint],
    config: Optional[SanitizerConfig] = None,
) -> dict[str, SanitizedSeries]:
    """Group a multi-card feed by ``card_id`` and sanitize each group.

    Observations without a ``card_id`` are dropped with a warning.
    """
    groups: dict[str, list[RawPricePoint]] = {}
    unkeyed = 0
    for point in raw:
        if point.card_id is None:
            unkeyed += 1
            continue
        groups.setdefault(point.card_id, []).append(point)
    if unkeyed:
        logger.warning("Dropped %d price observations without a card_id", unkeyed)
    return {card_id: sanitize_price_series(points, config) for card_id, points in groups.items()}
