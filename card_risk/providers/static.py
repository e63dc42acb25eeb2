"""
Offline providers.

These serve fixed or caller-supplied data and never touch the network. They
back the CLI's ``static`` provider mode and most tests.

``KnownPopulationProvider`` only answers for cards in its curated table.
Unknown cards get ``None`` (an unavailable signal), never an estimate.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from card_risk.config import MacroDefaultsConfig
from card_risk.models.card import CardMetadata
from card_risk.models.price import PricePoint, RawPricePoint
from card_risk.models.signals import MacroSignal, PopulationSignal, SentimentSignal

logger = logging.getLogger(__name__)

# Keyed by "<card name>-<set identifier>", lower-cased.
KNOWN_PSA10_POPULATIONS: dict[str, PopulationSignal] = {
    "charizard-base1": PopulationSignal(psa10_population=121,   total_graded=15000),
    "blastoise-base1": PopulationSignal(psa10_population=200,   total_graded=12000),
    "venusaur-base1":  PopulationSignal(psa10_population=180,   total_graded=11000),
    "pikachu-base1":   PopulationSignal(psa10_population=1500,  total_graded=35000),
    "charizard-swsh":  PopulationSignal(psa10_population=15000, total_graded=60000),
    "pikachu-vmax":    PopulationSignal(psa10_population=8000,  total_graded=40000),
    "umbreon-vmax":    PopulationSignal(psa10_population=5000,  total_graded=30000),
    "giratina-v":      PopulationSignal(psa10_population=12000, total_graded=50000),
    "stamp-pikachu":   PopulationSignal(psa10_population=2500,  total_graded=15000),
}


def population_key(name: str, set_identifier: str) -> str:
    return f"{name.strip().lower()}-{set_identifier.strip().lower()}"


class StaticMacroProvider:
    """Serves one fixed macro snapshot for every date.

    Leave ``btc_correlation`` unset to let the growth scorer's computed
    correlation take precedence.
    """

    name = "static-macro"

    def __init__(
        self,
        fear_greed_index: Optional[float] = None,
        policy_rate: Optional[float] = None,
        btc_correlation: Optional[float] = None,
        btc_prices: Sequence[PricePoint] = (),
    ) -> None:
        self._signal = MacroSignal(
            btc_correlation=btc_correlation,
            fear_greed_index=fear_greed_index,
            policy_rate=policy_rate,
            btc_prices=list(btc_prices),
        )

    @classmethod
    def from_defaults(cls, defaults: MacroDefaultsConfig) -> "StaticMacroProvider":
        return cls(
            fear_greed_index=defaults.fear_greed_index,
            policy_rate=defaults.policy_rate,
        )

    async def get_macro(self, as_of: date) -> Optional[MacroSignal]:
        return self._signal


class KnownPopulationProvider:
    """PSA-10 populations from a curated table."""

    name = "known-population"

    def __init__(self, table: Optional[Mapping[str, PopulationSignal]] = None) -> None:
        self._table = dict(KNOWN_PSA10_POPULATIONS if table is None else table)

    async def get_population(self, metadata: CardMetadata) -> Optional[PopulationSignal]:
        key = population_key(metadata.name, metadata.set_identifier)
        signal = self._table.get(key)
        if signal is None:
            logger.debug("No known PSA population for %s", key)
        return signal


class InMemorySentimentProvider:
    """Sentiment signals keyed by card_id."""

    name = "in-memory-sentiment"

    def __init__(self, signals: Mapping[str, SentimentSignal]) -> None:
        self._signals = dict(signals)

    async def get_sentiment(self, metadata: CardMetadata) -> Optional[SentimentSignal]:
        return self._signals.get(metadata.card_id)


class InMemoryPriceProvider:
    """Raw price observations grouped by ``card_id``."""

    name = "in-memory-prices"

    def __init__(self, points: Iterable[RawPricePoint]) -> None:
        self._by_card: dict[str, list[RawPricePoint]] = {}
        for point in points:
            if point.card_id is None:
                raise ValueError("InMemoryPriceProvider needs card_id on every point.")
            self._by_card.setdefault(point.card_id, []).append(point)

    async def get_price_history(self, card_id: str) -> list[RawPricePoint]:
        return list(self._by_card.get(card_id, []))


class InMemoryMetadataProvider:
    """Card metadata keyed by ``card_id``."""

    name = "in-memory-metadata"

    def __init__(self, cards: Iterable[CardMetadata]) -> None:
        self._cards = {card.card_id: card for card in cards}

    async def get_metadata(self, card_id: str) -> Optional[CardMetadata]:
        return self._cards.get(card_id)
