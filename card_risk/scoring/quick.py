"""
Quick score: an approximate total from price history and PSA population only.

Used for batch runs over many cards and whenever sentiment and macro data
cannot be fetched. Coarser tables than the full scorers:

    d1  CV of the last 30 prices (%):   >50 → 80, >30 → 50, >15 → 25, else 10
    d2  first→last return (%):          >500 → 90, >100 → 60, >30 → 30, else 10
    d3  PSA-10 population:               >10000 → 80, >2000 → 50, >500 → 25,
                                         else 5; unknown → 50
    d4, d5                               neutral 50

d3 reads a large graded population as *more* speculative (a heavily
submitted card is being flipped), the opposite of the full scarcity scorer.
Totals from the two paths are therefore not directly comparable.

d2 buckets the raw return with no vintage/modern benchmark, so
``is_vintage`` does not change a quick score.
"""

from __future__ import annotations

from typing import Optional, Sequence

from card_risk.models.price import PricePoint
from card_risk.scoring.aggregator import round_half_up
from card_risk.scoring.stats import coefficient_of_variation
from card_risk.scoring.weights import DIMENSION_WEIGHTS
from card_risk.taxonomy.rating_taxonomy import Dimension

QUICK_CV_WINDOW = 30
NEUTRAL_SCORE = 50.0


def _quick_volatility(prices: Sequence[float]) -> float:
    cv = coefficient_of_variation(prices[-QUICK_CV_WINDOW:])
    if cv > 50:
        return 80.0
    if cv > 30:
        return 50.0
    if cv > 15:
        return 25.0
    return 10.0


def _quick_growth(prices: Sequence[float]) -> float:
    total_return = (prices[-1] / prices[0] - 1.0) * 100.0 if len(prices) > 1 else 0.0
    if total_return > 500:
        return 90.0
    if total_return > 100:
        return 60.0
    if total_return > 30:
        return 30.0
    return 10.0


def _quick_scarcity(psa_population: Optional[int]) -> float:
    if psa_population is None:
        return NEUTRAL_SCORE
    if psa_population > 10000:
        return 80.0
    if psa_population > 2000:
        return 50.0
    if psa_population > 500:
        return 25.0
    return 5.0


def compute_quick_score(
    series: Sequence[PricePoint],
    psa_population: Optional[int],
    is_vintage: bool,
) -> int:
    """Approximate 0–100 speculation score. Pure and synchronous.

    Args:
        series: Daily price points; zero prices are ignored.
        psa_population: PSA-10 population, or ``None`` if unknown.
        is_vintage: Kept for call-site parity with the full engine; the
            quick tables do not depend on it.

    Returns:
        Integer total in [0, 100].
    """
    prices = [p.price for p in sorted(series, key=lambda p: p.date) if p.price > 0]

    sub_scores = {
        Dimension.VOLATILITY: _quick_volatility(prices),
        Dimension.GROWTH:     _quick_growth(prices),
        Dimension.SCARCITY:   _quick_scarcity(psa_population),
        Dimension.SENTIMENT:  NEUTRAL_SCORE,
        Dimension.MACRO:      NEUTRAL_SCORE,
    }
    total = sum(DIMENSION_WEIGHTS[d] * s for d, s in sub_scores.items())
    return max(0, min(100, round_half_up(total)))
