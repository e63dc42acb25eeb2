"""
D5 — Macro scorer.

Sub-metrics
-----------
crypto_correlation_score:
    |r| <0.2 → 10, <0.4 → 25, <0.6 → 50, <0.8 → 75, else 100.
fear_greed_score:
    ≥75 → 100, ≥55 → 75, ≥45 → 50, ≥25 → 30, else 15.
interest_rate_score:
    >5 → 30, >3 → 50, >1 → 70, else 90.
seasonal_score:
    Nov/Dec 80, Oct 70, Sep 60, Jan/Feb 30, Jun–Aug 35, other months 50.

Score formula
-------------
    d5 = 0.3 × crypto + 0.3 × fear_greed + 0.2 × rate + 0.2 × seasonal

Missing inputs are filled field by field from the configured snapshot
(``MacroDefaultsConfig``). The correlation comes from, in order: the macro
signal, the correlation the growth scorer computed from Bitcoin prices, the
snapshot. Any substitution marks the dimension degraded.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from card_risk.config import MacroDefaultsConfig
from card_risk.models.score import DimensionScore
from card_risk.models.signals import MacroSignal
from card_risk.scoring.stats import clamp
from card_risk.scoring.weights import weight_of
from card_risk.taxonomy.rating_taxonomy import Dimension


def crypto_correlation_to_score(corr: float) -> float:
    r = abs(corr)
    if r < 0.2:
        return 10.0
    if r < 0.4:
        return 25.0
    if r < 0.6:
        return 50.0
    if r < 0.8:
        return 75.0
    return 100.0


def fear_greed_to_score(index: float) -> float:
    if index >= 75:
        return 100.0
    if index >= 55:
        return 75.0
    if index >= 45:
        return 50.0
    if index >= 25:
        return 30.0
    return 15.0


def interest_rate_to_score(rate: float) -> float:
    if rate > 5:
        return 30.0
    if rate > 3:
        return 50.0
    if rate > 1:
        return 70.0
    return 90.0


def seasonal_score(month: int) -> float:
    if month in (11, 12):
        return 80.0
    if month == 10:
        return 70.0
    if month == 9:
        return 60.0
    if month in (1, 2):
        return 30.0
    if 6 <= month <= 8:
        return 35.0
    return 50.0


def score_macro(
    signal: Optional[MacroSignal],
    as_of: date,
    fallback_correlation: Optional[float] = None,
    defaults: Optional[MacroDefaultsConfig] = None,
    unavailable_reason: Optional[str] = None,
) -> DimensionScore:
    """Score the market environment the card trades in.

    Args:
        signal: Macro snapshot from a provider or the caller, or ``None``.
        as_of: Reference date; its month drives seasonality.
        fallback_correlation: Card/BTC correlation computed by the growth
            scorer, used when the signal carries none.
        defaults: Snapshot used for any missing field.
        unavailable_reason: Why ``signal`` is missing, recorded in details.

    Returns:
        ``DimensionScore`` for ``Dimension.MACRO``.
    """
    defaults = defaults or MacroDefaultsConfig()
    filled: list[str] = []

    if signal is not None and signal.btc_correlation is not None:
        correlation = signal.btc_correlation
        correlation_source = "signal"
    elif fallback_correlation is not None:
        correlation = fallback_correlation
        correlation_source = "computed"
    else:
        correlation = defaults.btc_correlation
        correlation_source = "default"
        filled.append("btc_correlation")

    if signal is not None and signal.fear_greed_index is not None:
        fear_greed = signal.fear_greed_index
    else:
        fear_greed = defaults.fear_greed_index
        filled.append("fear_greed_index")

    if signal is not None and signal.policy_rate is not None:
        rate = signal.policy_rate
    else:
        rate = defaults.policy_rate
        filled.append("policy_rate")

    crypto = crypto_correlation_to_score(correlation)
    fg = fear_greed_to_score(fear_greed)
    rate_score = interest_rate_to_score(rate)
    season = seasonal_score(as_of.month)

    total = 0.3 * crypto + 0.3 * fg + 0.2 * rate_score + 0.2 * season

    details: dict = {
        "btc_correlation": round(correlation, 6),
        "correlation_source": correlation_source,
        "crypto_correlation_score": crypto,
        "fear_greed_index": fear_greed,
        "fear_greed_score": fg,
        "policy_rate": rate,
        "interest_rate_score": rate_score,
        "month": as_of.month,
        "seasonal_score": season,
    }
    if filled:
        details["defaulted_fields"] = ",".join(filled)
    if signal is None:
        details["unavailable_reason"] = unavailable_reason or "no macro signal"

    return DimensionScore(
        dimension=Dimension.MACRO,
        score=clamp(total, 0.0, 100.0),
        weight=weight_of(Dimension.MACRO),
        details=details,
        degraded=bool(filled),
    )
