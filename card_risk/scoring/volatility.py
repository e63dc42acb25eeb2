"""
D1 — Volatility scorer.

Sub-metrics
-----------
cv (coefficient of variation, %):
    std / mean × 100 over the trailing 30-day window.
    <2 → 10, <5 → 40, <10 → 70, else 100.

ptr (peak-to-trough, %):
    (max − min) / min × 100 over the same window.
    <10 → 10, <30 → 40, <50 → 70, else 100.

acceleration (ratio of magnitudes):
    |mean of the last 7 daily returns| / |mean of the up-to-60 returns
    before them|, over the whole series. 0 when the series has fewer than
    14 points, the earlier window is empty, or its mean is 0.
    <2 → 0, <5 → 30, <10 → 50, else 70.

Score formula
-------------
    d1 = 0.4 × cv_score + 0.3 × ptr_score + 0.3 × acceleration_score

With fewer than two usable prices every metric is 0 and the score is the
floor of each table: 0.4 × 10 + 0.3 × 10 + 0.3 × 0 = 7.0.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Sequence

from card_risk.models.price import PricePoint
from card_risk.models.score import DimensionScore
from card_risk.scoring.stats import (
    clamp,
    coefficient_of_variation,
    daily_returns,
    mean,
    peak_to_trough,
)
from card_risk.scoring.weights import weight_of
from card_risk.taxonomy.rating_taxonomy import Dimension

WINDOW_DAYS = 30
RECENT_RETURNS = 7
PRIOR_RETURNS = 60
MIN_POINTS_FOR_ACCELERATION = 14


def cv_to_score(cv: float) -> float:
    if cv < 2:
        return 10.0
    if cv < 5:
        return 40.0
    if cv < 10:
        return 70.0
    return 100.0


def ptr_to_score(ptr: float) -> float:
    if ptr < 10:
        return 10.0
    if ptr < 30:
        return 40.0
    if ptr < 50:
        return 70.0
    return 100.0


def acceleration_to_score(acc: float) -> float:
    if acc < 2:
        return 0.0
    if acc < 5:
        return 30.0
    if acc < 10:
        return 50.0
    return 70.0


def calculate_acceleration(prices: Sequence[float]) -> float:
    """Ratio of recent to earlier mean daily return magnitude.

    Args:
        prices: Positive prices in ascending date order.

    Returns:
        Non-negative ratio; 0.0 when it cannot be computed.
    """
    if len(prices) < MIN_POINTS_FOR_ACCELERATION:
        return 0.0

    returns = daily_returns(prices)
    recent = returns[-RECENT_RETURNS:]
    prior = returns[-(RECENT_RETURNS + PRIOR_RETURNS):-RECENT_RETURNS]
    if not recent or not prior:
        return 0.0

    avg_prior = abs(mean(prior))
    if avg_prior == 0:
        return 0.0
    return abs(mean(recent)) / avg_prior


def trailing_window(series: Sequence[PricePoint], days: int = WINDOW_DAYS) -> list[PricePoint]:
    """Points within ``days`` calendar days of the last date (inclusive)."""
    if not series:
        return []
    cutoff = series[-1].date - timedelta(days=days - 1)
    return [p for p in series if p.date >= cutoff]


def score_volatility(series: Sequence[PricePoint]) -> DimensionScore:
    """Score price instability for one card.

    Args:
        series: Daily price points. Order does not matter; zero prices are
            ignored.

    Returns:
        ``DimensionScore`` for ``Dimension.VOLATILITY``. Never raises.
    """
    usable = sorted((p for p in series if p.price > 0), key=lambda p: p.date)

    if len(usable) < 2:
        return DimensionScore(
            dimension=Dimension.VOLATILITY,
            score=0.4 * cv_to_score(0.0) + 0.3 * ptr_to_score(0.0) + 0.3 * acceleration_to_score(0.0),
            weight=weight_of(Dimension.VOLATILITY),
            details={
                "cv": 0.0,
                "cv_score": cv_to_score(0.0),
                "ptr": 0.0,
                "ptr_score": ptr_to_score(0.0),
                "acceleration": 0.0,
                "acceleration_score": acceleration_to_score(0.0),
                "window_points": len(usable),
                "insufficient_data": True,
            },
        )

    window_prices = [p.price for p in trailing_window(usable)]
    all_prices = [p.price for p in usable]

    cv = coefficient_of_variation(window_prices)
    ptr = peak_to_trough(window_prices)
    acc = calculate_acceleration(all_prices)

    cv_score = cv_to_score(cv)
    ptr_score = ptr_to_score(ptr)
    acc_score = acceleration_to_score(acc)

    total = 0.4 * cv_score + 0.3 * ptr_score + 0.3 * acc_score

    return DimensionScore(
        dimension=Dimension.VOLATILITY,
        score=clamp(total, 0.0, 100.0),
        weight=weight_of(Dimension.VOLATILITY),
        details={
            "cv": round(cv, 4),
            "cv_score": cv_score,
            "ptr": round(ptr, 4),
            "ptr_score": ptr_score,
            "acceleration": round(acc, 4),
            "acceleration_score": acc_score,
            "window_points": len(window_prices),
            "insufficient_data": False,
        },
    )
