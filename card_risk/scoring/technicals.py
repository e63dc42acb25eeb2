"""
Price-series technicals and the rebound score.

Indicators
----------
rsi14:
    Wilder-smoothed relative strength index over 14 periods. Fewer than
    15 prices → neutral 50; no losses in the window → 100.

macd:
    line = EMA12 − EMA26, signal = EMA9 of the line's history (from the 26th
    price on), histogram = line − signal. Fewer than 26 prices → all zero;
    fewer than 9 history values → signal equals the line. EMAs are seeded
    with the simple mean of their first ``period`` values.

volume_ratio:
    current volume / mean of historical volumes. No history, no current
    volume or a zero mean → neutral 1.0.

Rebound score (0–100)
---------------------
    rsi < 30                      +35  (oversold)
    30 ≤ rsi < 40                 +20
    rsi > 70                      −15  (overbought)
    bullish macd                  +35  (histogram > 0 and line > signal)
    bearish macd                  −10  (histogram < 0 and line < signal)
    volume_ratio > 2              +30  (spiking)

The sum is clamped to [0, 100]. Actions: ≥80 strong_buy, ≥60 buy, ≥40 hold,
≥20 sell, else strong_sell. Confidence adds 0.30 / 0.15 / 0.35 / 0.25 for
the oversold, near-oversold, bullish and spiking signals, capped at 1.

These read the same ``PricePoint`` series as the dimension scorers but are
not part of the speculation total.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Literal, Sequence

from pydantic import BaseModel, ConfigDict

from card_risk.models.price import PricePoint
from card_risk.scoring.stats import clamp, mean

RSI_PERIOD = 14
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
NEUTRAL_RSI = 50.0
NEUTRAL_VOLUME_RATIO = 1.0
VOLUME_SPIKE_RATIO = 2.0


class ReboundAction(StrEnum):
    STRONG_BUY  = "strong_buy"
    BUY         = "buy"
    HOLD        = "hold"
    SELL        = "sell"
    STRONG_SELL = "strong_sell"


class MacdResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    macd_line: float = 0.0
    signal_line: float = 0.0
    histogram: float = 0.0


class TechnicalIndicators(BaseModel):
    """Indicator snapshot for the latest price in a series."""

    model_config = ConfigDict(frozen=True)

    rsi14: float
    macd: MacdResult
    volume_ratio: float
    is_oversold: bool
    is_volume_spiking: bool
    is_macd_bullish: bool


class ReboundScore(BaseModel):
    """Likelihood of a short-term bounce, from the technicals alone."""

    model_config = ConfigDict(frozen=True)

    score: int
    confidence: float
    rsi_signal: Literal["oversold", "neutral", "overbought"]
    macd_signal: Literal["bullish", "neutral", "bearish"]
    volume_signal: Literal["spiking", "normal", "low"]
    recommendation: ReboundAction


def _round_to(value: float, places: int) -> float:
    scale = 10 ** places
    return math.floor(value * scale + 0.5) / scale


# ── Indicators ─────────────────────────────────────────────────────────────────

def calculate_rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> float:
    """Relative strength index in [0, 100], rounded to 2 places."""
    if len(prices) < period + 1:
        return NEUTRAL_RSI

    changes = [b - a for a, b in zip(prices, prices[1:])]
    avg_gain = sum(c for c in changes[:period] if c > 0) / period
    avg_loss = sum(-c for c in changes[:period] if c < 0) / period

    for change in changes[period:]:
        avg_gain = (avg_gain * (period - 1) + max(change, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-change, 0.0)) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return _round_to(100.0 - 100.0 / (1.0 + rs), 2)


def calculate_ema(values: Sequence[float], period: int) -> float:
    """EMA of ``values`` seeded with the mean of the first ``period``.

    Shorter input returns its last value (0.0 when empty).
    """
    if not values:
        return 0.0
    if len(values) < period:
        return values[-1]

    multiplier = 2.0 / (period + 1)
    ema = mean(values[:period])
    for value in values[period:]:
        ema = (value - ema) * multiplier + ema
    return ema


def calculate_macd(prices: Sequence[float]) -> MacdResult:
    """MACD line, signal and histogram, each rounded to 3 places."""
    if len(prices) < MACD_SLOW:
        return MacdResult()

    history = [
        calculate_ema(prices[: i + 1], MACD_FAST) - calculate_ema(prices[: i + 1], MACD_SLOW)
        for i in range(MACD_SLOW - 1, len(prices))
    ]
    line = history[-1]
    signal = calculate_ema(history, MACD_SIGNAL) if len(history) >= MACD_SIGNAL else line

    return MacdResult(
        macd_line=_round_to(line, 3),
        signal_line=_round_to(signal, 3),
        histogram=_round_to(line - signal, 3),
    )


def calculate_volume_ratio(current_volume: float, historical_volumes: Sequence[float]) -> float:
    """Current volume relative to the historical mean, rounded to 2 places."""
    if not historical_volumes or current_volume == 0:
        return NEUTRAL_VOLUME_RATIO
    avg_volume = mean(historical_volumes)
    if avg_volume == 0:
        return NEUTRAL_VOLUME_RATIO
    return _round_to(current_volume / avg_volume, 2)


def compute_technical_indicators(
    series: Sequence[PricePoint],
    current_volume: float = 0.0,
    historical_volumes: Sequence[float] = (),
) -> TechnicalIndicators:
    """Indicators for the most recent point of ``series``.

    Args:
        series: Daily price points in any order; zero prices are ignored.
        current_volume: Sales volume for the latest period.
        historical_volumes: Earlier per-period volumes.
    """
    prices = [p.price for p in sorted(series, key=lambda p: p.date) if p.price > 0]

    rsi = calculate_rsi(prices)
    macd = calculate_macd(prices)
    volume_ratio = calculate_volume_ratio(current_volume, historical_volumes)

    return TechnicalIndicators(
        rsi14=rsi,
        macd=macd,
        volume_ratio=volume_ratio,
        is_oversold=rsi < 30,
        is_volume_spiking=volume_ratio > VOLUME_SPIKE_RATIO,
        is_macd_bullish=macd.histogram > 0 and macd.macd_line > macd.signal_line,
    )


# ── Rebound score ──────────────────────────────────────────────────────────────

def _action_for(score: float) -> ReboundAction:
    if score >= 80:
        return ReboundAction.STRONG_BUY
    if score >= 60:
        return ReboundAction.BUY
    if score >= 40:
        return ReboundAction.HOLD
    if score >= 20:
        return ReboundAction.SELL
    return ReboundAction.STRONG_SELL


def score_rebound(indicators: TechnicalIndicators) -> ReboundScore:
    """Combine RSI, MACD and volume into a 0–100 rebound score."""
    points = 0.0
    confidence = 0.0

    rsi_signal: Literal["oversold", "neutral", "overbought"] = "neutral"
    if indicators.rsi14 < 30:
        points += 35
        confidence += 0.30
        rsi_signal = "oversold"
    elif indicators.rsi14 < 40:
        points += 20
        confidence += 0.15
    elif indicators.rsi14 > 70:
        points -= 15
        rsi_signal = "overbought"

    macd = indicators.macd
    macd_signal: Literal["bullish", "neutral", "bearish"] = "neutral"
    if indicators.is_macd_bullish:
        points += 35
        confidence += 0.35
        macd_signal = "bullish"
    elif macd.histogram < 0 and macd.macd_line < macd.signal_line:
        points -= 10
        macd_signal = "bearish"

    volume_signal: Literal["spiking", "normal", "low"] = "normal"
    if indicators.is_volume_spiking:
        points += 30
        confidence += 0.25
        volume_signal = "spiking"
    elif indicators.volume_ratio < 0.5:
        volume_signal = "low"

    score = clamp(points, 0.0, 100.0)
    return ReboundScore(
        score=int(math.floor(score + 0.5)),
        confidence=clamp(confidence, 0.0, 1.0),
        rsi_signal=rsi_signal,
        macd_signal=macd_signal,
        volume_signal=volume_signal,
        recommendation=_action_for(score),
    )
