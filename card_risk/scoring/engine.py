"""
Scoring engine — one card in, one ``FullSpeculationScore`` out.

Flow of ``compute_full_score()``:
  1. Sanitize the price series (dedup, outlier flags, gap interpolation),
     unless ``settings.scoring.sanitize_input`` is off.
  2. Resolve the population, sentiment and macro signals. Values the caller
     passed in ``ScoringSignals`` are used as-is; the rest are fetched from
     the injected ``ProviderSet`` concurrently, each under its own timeout.
     A failed fetch becomes an unavailable ``Signal`` and degrades only its
     own dimension.
  3. Run the five dimension scorers (pure, synchronous).
  4. Aggregate, classify, recommend and summarise.

The engine holds no state between calls and never builds providers itself.
Given the same inputs, signals and ``as_of``, the output is identical.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from functools import partial
from typing import Awaitable, Callable, Optional, Sequence, TypeVar, Union

from card_risk.config import MacroDefaultsConfig, ScoringSettings
from card_risk.models.card import CardMetadata
from card_risk.models.price import PricePoint, RawPricePoint
from card_risk.models.score import DimensionScore, FullSpeculationScore
from card_risk.models.signals import (
    MacroSignal,
    PopulationSignal,
    ScoringSignals,
    SentimentSignal,
    Signal,
)
from card_risk.pipeline.sanitizer import sanitize_price_series
from card_risk.providers.base import ProviderSet, fetch_signal
from card_risk.scoring.aggregator import aggregate, build_summary, classify, recommend
from card_risk.scoring.growth import score_growth
from card_risk.scoring.macro import score_macro
from card_risk.scoring.quick import compute_quick_score
from card_risk.scoring.scarcity import score_scarcity
from card_risk.scoring.sentiment import score_sentiment
from card_risk.scoring.volatility import score_volatility
from card_risk.utils.time_utils import as_of_datetime, today_utc

logger = logging.getLogger(__name__)

__all__ = [
    "ProviderSet",
    "compute_full_score",
    "compute_quick_score",
    "prepare_series",
    "sanitize_price_series",
    "score_card",
    "score_dimensions",
]

T = TypeVar("T")

PriceInput = Union[PricePoint, RawPricePoint]


# ── Series preparation ────────────────────────────────────────────────────────

def _as_raw(card_id: str, point: PriceInput) -> RawPricePoint:
    if isinstance(point, RawPricePoint):
        return point
    return RawPricePoint(card_id=card_id, date=point.date, price=point.price)


def prepare_series(
    card_id: str,
    price_series: Sequence[PriceInput],
    settings: ScoringSettings,
) -> list[PricePoint]:
    """Turn caller input into the series the scorers consume.

    Raw points are always sanitized. Already-validated ``PricePoint`` input
    is sanitized unless ``sanitize_input`` is off, in which case it is only
    sorted.
    """
    has_raw = any(isinstance(p, RawPricePoint) for p in price_series)
    if not settings.scoring.sanitize_input and not has_raw:
        return sorted(price_series, key=lambda p: p.date)

    # The series belongs to card_id, whatever the feed labelled it.
    raw = [_as_raw(card_id, p).model_copy(update={"card_id": card_id}) for p in price_series]
    sanitized = sanitize_price_series(raw, settings.sanitizer)
    if settings.scoring.exclude_interpolated:
        return sanitized.observed_series
    return sanitized.cleaned_series


# ── Signal resolution ─────────────────────────────────────────────────────────

async def _resolve(
    source: str,
    supplied: Optional[T],
    provider_call: Optional[Callable[[], Awaitable[Optional[T]]]],
    timeout_seconds: float,
) -> Signal[T]:
    if supplied is not None:
        return Signal.available(supplied, source="caller")
    call = provider_call() if provider_call is not None else None
    return await fetch_signal(source, call, timeout_seconds)


async def gather_signals(
    metadata: CardMetadata,
    as_of: date,
    signals: ScoringSignals,
    providers: ProviderSet,
    timeout_seconds: float,
) -> tuple[Signal[PopulationSignal], Signal[SentimentSignal], Signal[MacroSignal]]:
    """Fetch the three external signals concurrently (fan-out, join on all)."""
    population_supplied = signals.population
    if population_supplied is None and metadata.psa_population is not None:
        population_supplied = PopulationSignal(psa10_population=metadata.psa_population)

    population_call = sentiment_call = macro_call = None
    if providers.population is not None:
        population_call = partial(providers.population.get_population, metadata)
    if providers.sentiment is not None:
        sentiment_call = partial(providers.sentiment.get_sentiment, metadata)
    if providers.macro is not None:
        macro_call = partial(providers.macro.get_macro, as_of)

    population, sentiment, macro = await asyncio.gather(
        _resolve("population", population_supplied, population_call, timeout_seconds),
        _resolve("sentiment", signals.sentiment, sentiment_call, timeout_seconds),
        _resolve("macro", signals.macro, macro_call, timeout_seconds),
    )
    return population, sentiment, macro


# ── Scoring ───────────────────────────────────────────────────────────────────

def score_dimensions(
    series: Sequence[PricePoint],
    metadata: CardMetadata,
    as_of: date,
    sentiment: Signal[SentimentSignal],
    macro: Signal[MacroSignal],
    btc_prices: Sequence[PricePoint] = (),
    macro_defaults: Optional[MacroDefaultsConfig] = None,
) -> tuple[DimensionScore, ...]:
    """Run the five scorers. Pure: no I/O, no clock reads.

    Returns:
        Volatility, growth, scarcity, sentiment and macro scores, in order.
    """
    volatility = score_volatility(series)
    growth = score_growth(series, metadata.is_vintage, btc_prices or None)
    scarcity = score_scarcity(metadata, as_of)
    sentiment_score = score_sentiment(
        sentiment.value if sentiment.is_available else None,
        metadata,
        unavailable_reason=sentiment.reason,
    )
    computed_corr = growth.details.get("btc_correlation")
    macro_score = score_macro(
        macro.value if macro.is_available else None,
        as_of,
        fallback_correlation=computed_corr if isinstance(computed_corr, float) else None,
        defaults=macro_defaults,
        unavailable_reason=macro.reason,
    )
    return volatility, growth, scarcity, sentiment_score, macro_score


async def compute_full_score(
    card_id: str,
    price_series: Sequence[PriceInput],
    metadata: CardMetadata,
    signals: Optional[ScoringSignals] = None,
    providers: Optional[ProviderSet] = None,
    *,
    as_of: Optional[date] = None,
    settings: Optional[ScoringSettings] = None,
) -> FullSpeculationScore:
    """Compute the five-dimension speculation score for one card.

    Args:
        card_id: Identity of the scored card; wins over ``metadata.card_id``.
        price_series: Daily prices, raw or validated, in any order.
        metadata: Card snapshot.
        signals: Caller-supplied signals; each one set skips its provider.
        providers: Providers for whatever ``signals`` leaves unset.
        as_of: Reference date for set age, seasonality and ``computed_at``.
            Defaults to today (UTC).
        settings: Sanitizer, macro defaults and provider timeout.

    Returns:
        ``FullSpeculationScore``. Missing data degrades dimensions; it never
        raises.
    """
    settings = settings or ScoringSettings()
    signals = signals or ScoringSignals()
    providers = providers or ProviderSet()
    as_of = as_of or today_utc()

    series = prepare_series(card_id, price_series, settings)

    population, sentiment, macro = await gather_signals(
        metadata, as_of, signals, providers, settings.provider_timeout_seconds,
    )

    if population.is_available and population.value.psa10_population is not None:
        metadata = metadata.model_copy(
            update={"psa_population": population.value.psa10_population}
        )

    btc_prices = list(signals.btc_prices)
    if not btc_prices and macro.is_available:
        btc_prices = list(macro.value.btc_prices)

    dimensions = score_dimensions(
        series, metadata, as_of, sentiment, macro, btc_prices, settings.macro_defaults,
    )
    volatility, growth, scarcity, sentiment_score, macro_score = dimensions

    total = aggregate(dimensions)
    rating = classify(total)
    degraded = [d.dimension for d in dimensions if d.degraded]
    if degraded:
        logger.info(
            "Card %s scored with defaults for: %s",
            card_id, ", ".join(d.value for d in degraded),
        )

    card_name = metadata.name or card_id
    return FullSpeculationScore(
        card_id=card_id,
        card_name=card_name,
        total_score=total,
        rating=rating,
        rating_label=rating.label,
        rating_color=rating.color,
        recommendation=recommend(total, metadata.is_vintage),
        summary=build_summary(card_name, rating, degraded),
        volatility=volatility,
        growth=growth,
        scarcity=scarcity,
        sentiment=sentiment_score,
        macro=macro_score,
        degraded_dimensions=degraded,
        computed_at=as_of_datetime(as_of),
    )


def score_card(
    card_id: str,
    price_series: Sequence[PriceInput],
    metadata: CardMetadata,
    signals: Optional[ScoringSignals] = None,
    providers: Optional[ProviderSet] = None,
    *,
    as_of: Optional[date] = None,
    settings: Optional[ScoringSettings] = None,
) -> FullSpeculationScore:
    """Synchronous wrapper around ``compute_full_score()``.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(
        compute_full_score(
            card_id, price_series, metadata, signals, providers,
            as_of=as_of, settings=settings,
        )
    )
