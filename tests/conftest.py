"""
Shared pytest fixtures for the card risk test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - Factories for price series, card metadata and dimension scores.
  - ``sample_full_score``: A complete ``FullSpeculationScore`` built by the
    real engine, for persistence tests.
"""

from __future__ import annotations

import sqlite3
from datetime import date, timedelta
from typing import Callable, Generator, Optional, Sequence

import pytest

from card_risk.db.schema import apply_schema
from card_risk.models.card import CardMetadata
from card_risk.models.price import PricePoint, RawPricePoint
from card_risk.models.score import DimensionScore, FullSpeculationScore
from card_risk.scoring.engine import score_card
from card_risk.scoring.weights import DIMENSION_WEIGHTS
from card_risk.taxonomy.rating_taxonomy import Dimension

SERIES_START = date(2024, 1, 1)


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Factories ─────────────────────────────────────────────────────────────────

@pytest.fixture
def make_series() -> Callable[..., list[PricePoint]]:
    """Build a daily ``PricePoint`` series from a list of prices."""

    def _make(prices: Sequence[float], start: date = SERIES_START) -> list[PricePoint]:
        return [
            PricePoint(date=start + timedelta(days=i), price=p)
            for i, p in enumerate(prices)
        ]

    return _make


@pytest.fixture
def make_raw() -> Callable[..., RawPricePoint]:
    """Build one ``RawPricePoint`` from a day offset and a price."""

    def _make(
        day: int,
        price: Optional[float],
        card_id: Optional[str] = "base1-4",
        recorded_at=None,
        start: date = SERIES_START,
    ) -> RawPricePoint:
        return RawPricePoint(
            card_id=card_id,
            date=start + timedelta(days=day),
            price=price,
            recorded_at=recorded_at,
        )

    return _make


@pytest.fixture
def make_metadata() -> Callable[..., CardMetadata]:
    """Build ``CardMetadata`` with sensible vintage Charizard defaults."""

    def _make(**overrides) -> CardMetadata:
        fields = dict(
            card_id="base1-4",
            name="Charizard",
            rarity="Rare Holo",
            set_identifier="base1",
            is_vintage=True,
            psa_population=121,
            active_listings=40,
            sold_listings_30d=25,
        )
        fields.update(overrides)
        return CardMetadata(**fields)

    return _make


@pytest.fixture
def make_dimension() -> Callable[..., DimensionScore]:
    """Build a ``DimensionScore`` with the canonical weight."""

    def _make(dimension: Dimension, score: float, degraded: bool = False) -> DimensionScore:
        return DimensionScore(
            dimension=dimension,
            score=score,
            weight=DIMENSION_WEIGHTS[dimension],
            degraded=degraded,
        )

    return _make


@pytest.fixture
def sample_full_score(make_series, make_metadata) -> FullSpeculationScore:
    """A vintage card with a flat 60-day history, scored on 2024-06-01."""
    return score_card(
        "base1-4",
        make_series([400.0] * 60),
        make_metadata(),
        as_of=date(2024, 6, 1),
    )
