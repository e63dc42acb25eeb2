"""
D2 — Inorganic growth scorer.

Sub-metrics
-----------
excess_return (%):
    (current / price one year before − 1) × 100 − benchmark, where the
    benchmark is 18% for vintage cards and 8% for modern ones. The
    year-ago price is the last point on or before ``last_date − 365 days``,
    or the earliest point when the history is shorter than a year.
    <0 → 0, <100 → 25, <200 → 50, <500 → 75, else 100.

pump_dump_ratio:
    Length of the run of non-decreasing steps ending at the first all-time
    peak, divided by the run of strictly decreasing steps right after it.
    A fast rise followed by a slow bleed reads < 0.5; a long sustained rise
    reads > 5.
    <0.5 → 40, >5 → 30, else 10.

btc_correlation:
    Pearson correlation between card and Bitcoin daily returns, taken over
    the dates both series have. |r| >0.85 → 70, >0.7 → 45, >0.5 → 25,
    else 0. With no Bitcoin series, or fewer than three paired returns,
    the crypto score is the neutral 25 and the correlation is reported as
    ``None``.

Score formula
-------------
    d2 = 0.4 × excess_score + 0.3 × pump_dump_score + 0.3 × crypto_score
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from card_risk.models.price import PricePoint
from card_risk.models.score import DimensionScore
from card_risk.scoring.stats import clamp, daily_returns, pearson_correlation
from card_risk.scoring.weights import weight_of
from card_risk.taxonomy.rating_taxonomy import Dimension

VINTAGE_BENCHMARK_PCT = 18.0
MODERN_BENCHMARK_PCT = 8.0

MIN_POINTS_FOR_PUMP_DUMP = 10
MIN_PAIRED_RETURNS = 3
DEFAULT_CRYPTO_SCORE = 25.0


def benchmark_for(is_vintage: bool) -> float:
    return VINTAGE_BENCHMARK_PCT if is_vintage else MODERN_BENCHMARK_PCT


def price_one_year_before(series: Sequence[PricePoint]) -> float:
    """Price on or before one year before the last date, else the earliest.

    ``series`` must be sorted ascending and non-empty.
    """
    target = series[-1].date - timedelta(days=365)
    prior = series[0].price
    for point in series:
        if point.date > target:
            break
        prior = point.price
    return prior


def calculate_excess_return(current: float, prior: float, benchmark: float) -> float:
    if prior <= 0:
        return 0.0
    return (current / prior - 1.0) * 100.0 - benchmark


def excess_return_to_score(excess: float) -> float:
    if excess < 0:
        return 0.0
    if excess < 100:
        return 25.0
    if excess < 200:
        return 50.0
    if excess < 500:
        return 75.0
    return 100.0


def calculate_pump_dump_ratio(prices: Sequence[float]) -> float:
    """Rise/fall duration ratio around the first all-time peak.

    Args:
        prices: Prices in ascending date order.

    Returns:
        ``rise / fall``; ``max(rise, 1)`` when the peak is not followed by a
        fall; 1.0 when there are fewer than 10 prices.
    """
    if len(prices) < MIN_POINTS_FOR_PUMP_DUMP:
        return 1.0

    peak_idx = 0
    for i, price in enumerate(prices):
        if price > prices[peak_idx]:
            peak_idx = i

    rise = 0
    i = peak_idx
    while i > 0 and prices[i] >= prices[i - 1]:
        rise += 1
        i -= 1

    fall = 0
    i = peak_idx
    while i < len(prices) - 1 and prices[i] > prices[i + 1]:
        fall += 1
        i += 1

    if fall == 0:
        return float(max(rise, 1))
    return rise / fall


def pump_dump_to_score(ratio: float) -> float:
    if ratio < 0.5:
        return 40.0
    if ratio > 5:
        return 30.0
    return 10.0


def calculate_btc_correlation(
    series: Sequence[PricePoint],
    btc_series: Sequence[PricePoint],
) -> Optional[float]:
    """Correlation of daily returns over the dates both series share.

    Returns:
        Pearson coefficient in [-1, 1], or ``None`` when fewer than three
        paired returns are available.
    """
    btc_by_date = {p.date: p.price for p in btc_series if p.price > 0}
    shared = [
        (p.price, btc_by_date[p.date])
        for p in sorted(series, key=lambda p: p.date)
        if p.price > 0 and p.date in btc_by_date
    ]
    card_returns = daily_returns([card for card, _ in shared])
    btc_returns = daily_returns([btc for _, btc in shared])
    if len(card_returns) < MIN_PAIRED_RETURNS or len(card_returns) != len(btc_returns):
        return None
    return pearson_correlation(card_returns, btc_returns)


def crypto_correlation_to_score(corr: float) -> float:
    r = abs(corr)
    if r > 0.85:
        return 70.0
    if r > 0.7:
        return 45.0
    if r > 0.5:
        return 25.0
    return 0.0


def score_growth(
    series: Sequence[PricePoint],
    is_vintage: bool,
    btc_series: Optional[Sequence[PricePoint]] = None,
) -> DimensionScore:
    """Score how inorganic a card's growth looks.

    Args:
        series: Daily price points; zero prices are ignored.
        is_vintage: Selects the 18% (vintage) or 8% (modern) benchmark.
        btc_series: Optional daily Bitcoin prices for the crypto metric.

    Returns:
        ``DimensionScore`` for ``Dimension.GROWTH``. ``details["btc_correlation"]``
        carries the computed correlation (or ``None``) for the macro scorer.
    """
    usable = sorted((p for p in series if p.price > 0), key=lambda p: p.date)
    benchmark = benchmark_for(is_vintage)

    if usable:
        current = usable[-1].price
        prior = price_one_year_before(usable)
        excess = calculate_excess_return(current, prior, benchmark)
    else:
        current = prior = excess = 0.0
    excess_score = excess_return_to_score(excess)

    ratio = calculate_pump_dump_ratio([p.price for p in usable])
    pump_score = pump_dump_to_score(ratio)

    corr: Optional[float] = None
    if btc_series:
        corr = calculate_btc_correlation(usable, btc_series)
    crypto_score = DEFAULT_CRYPTO_SCORE if corr is None else crypto_correlation_to_score(corr)

    total = 0.4 * excess_score + 0.3 * pump_score + 0.3 * crypto_score

    return DimensionScore(
        dimension=Dimension.GROWTH,
        score=clamp(total, 0.0, 100.0),
        weight=weight_of(Dimension.GROWTH),
        details={
            "current_price": current,
            "price_one_year_ago": prior,
            "benchmark_pct": benchmark,
            "excess_return": round(excess, 4),
            "excess_return_score": excess_score,
            "pump_dump_ratio": round(ratio, 4),
            "pump_dump_score": pump_score,
            "btc_correlation": None if corr is None else round(corr, 6),
            "crypto_correlation_score": crypto_score,
            "insufficient_data": len(usable) < 2,
        },
    )
