"""
External signal models and the ``Signal`` result wrapper.

Providers (sentiment, macro, population) are optional collaborators. Every
provider call made by the engine resolves to a ``Signal``: either
*available* with a value, or *unavailable* with a status and reason. The
dimension scorers receive the plain value or ``None``. Default substitution
happens in exactly one place per scorer.

``ScoringSignals`` bundles signals a caller already has in hand (for example
values read from a file); they take precedence over provider calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

from card_risk.models.price import PricePoint

T = TypeVar("T")


class SignalStatus(StrEnum):
    """Outcome of a provider call."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class Signal(Generic[T]):
    """A provider result: a value, or an explicit unavailable marker.

    Attributes:
        value: The signal payload when available, else ``None``.
        status: ``SignalStatus`` of the call.
        reason: Human-readable cause when not available.
        source: Provider name that produced (or failed to produce) the value.
    """

    value: Optional[T] = None
    status: SignalStatus = SignalStatus.AVAILABLE
    reason: Optional[str] = None
    source: Optional[str] = None

    @classmethod
    def available(cls, value: T, source: Optional[str] = None) -> "Signal[T]":
        return cls(value=value, status=SignalStatus.AVAILABLE, source=source)

    @classmethod
    def unavailable(
        cls,
        reason: str,
        status: SignalStatus = SignalStatus.UNAVAILABLE,
        source: Optional[str] = None,
    ) -> "Signal[T]":
        return cls(value=None, status=status, reason=reason, source=source)

    @property
    def is_available(self) -> bool:
        return self.status == SignalStatus.AVAILABLE and self.value is not None


class SentimentSignal(BaseModel):
    """Social and order-book activity for one card.

    Attributes:
        reddit_mentions: Mentions over the last week on Reddit.
        twitter_mentions: Mentions on Twitter/X.
        youtube_mentions: Mentions on YouTube.
        discord_mentions: Mentions on Discord.
        buy_orders: Open buy orders, or ``None`` if unknown.
        sell_orders: Open sell orders, or ``None`` if unknown.
        search_volume_change: Week-over-week search volume change in percent,
            or ``None`` if unknown.
    """

    model_config = ConfigDict(frozen=True)

    reddit_mentions: int = 0
    twitter_mentions: int = 0
    youtube_mentions: int = 0
    discord_mentions: int = 0
    buy_orders: Optional[int] = None
    sell_orders: Optional[int] = None
    search_volume_change: Optional[float] = None

    @field_validator(
        "reddit_mentions", "twitter_mentions", "youtube_mentions",
        "discord_mentions", "buy_orders", "sell_orders",
    )
    @classmethod
    def validate_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Mention and order counts must be non-negative.")
        return v


class MacroSignal(BaseModel):
    """Macro-economic environment snapshot.

    Any field left ``None`` is filled from the configured default snapshot
    by the macro scorer, field by field.

    Attributes:
        btc_correlation: Card/Bitcoin correlation coefficient in [-1, 1].
        fear_greed_index: Fear & Greed index in [0, 100].
        policy_rate: Policy interest rate in percent.
        btc_prices: Daily Bitcoin prices, used by the growth scorer to
            compute the card's own correlation.
    """

    model_config = ConfigDict(frozen=True)

    btc_correlation: Optional[float] = None
    fear_greed_index: Optional[float] = None
    policy_rate: Optional[float] = None
    btc_prices: list[PricePoint] = []

    @field_validator("btc_correlation")
    @classmethod
    def validate_correlation(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not -1.0 <= v <= 1.0:
            raise ValueError(f"btc_correlation must be in [-1, 1], got {v}.")
        return v

    @field_validator("fear_greed_index")
    @classmethod
    def validate_fear_greed(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 100.0:
            raise ValueError(f"fear_greed_index must be in [0, 100], got {v}.")
        return v


class PopulationSignal(BaseModel):
    """Graded population for one card."""

    model_config = ConfigDict(frozen=True)

    psa10_population: Optional[int] = None
    total_graded: Optional[int] = None

    @field_validator("psa10_population", "total_graded")
    @classmethod
    def validate_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Population counts must be non-negative.")
        return v


class ScoringSignals(BaseModel):
    """Signals supplied directly by the caller.

    Each field set here wins over the corresponding provider call, which is
    then skipped entirely.
    """

    model_config = ConfigDict(frozen=True)

    sentiment: Optional[SentimentSignal] = None
    macro: Optional[MacroSignal] = None
    population: Optional[PopulationSignal] = None
    btc_prices: list[PricePoint] = []
