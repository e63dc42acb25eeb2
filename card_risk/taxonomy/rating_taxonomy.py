"""
Rating taxonomy for speculation scores.

Three enums describe every scored card:
  - ``Dimension``      — which axis a sub-score belongs to.
  - ``Rating``         — the qualitative band of the 0–100 total.
  - ``Recommendation`` — the action shown to the user.

Usage example::

    from card_risk.taxonomy.rating_taxonomy import Rating, Recommendation

    rating = Rating.ACCEPTABLE
    action = Recommendation.HOLD

This module has NO imports from any other ``card_risk`` package.
"""

from enum import StrEnum


class Dimension(StrEnum):
    """The five independently scored axes."""

    VOLATILITY = "volatility"
    """Price instability over the trailing month."""

    GROWTH = "growth"
    """Inorganic growth: excess return, pump shape, crypto coupling."""

    SCARCITY = "scarcity"
    """Rarity, graded population, supply/demand and age."""

    SENTIMENT = "sentiment"
    """Social buzz, order-book imbalance and hype."""

    MACRO = "macro"
    """Crypto correlation, Fear & Greed, rates and seasonality."""


class Rating(StrEnum):
    """Qualitative band of the total speculation score."""

    SOLID_INVESTMENT = "solid_investment"
    ACCEPTABLE = "acceptable"
    MODERATE_SPECULATION = "moderate_speculation"
    HIGH_SPECULATION = "high_speculation"
    MANIA = "mania"

    @property
    def label(self) -> str:
        return _RATING_LABELS[self]

    @property
    def color(self) -> str:
        return _RATING_COLORS[self]


class Recommendation(StrEnum):
    """User-facing action for a scored card."""

    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    AVOID = "AVOID"


_RATING_LABELS: dict[Rating, str] = {
    Rating.SOLID_INVESTMENT:     "Solid Investment",
    Rating.ACCEPTABLE:           "Acceptable Investment",
    Rating.MODERATE_SPECULATION: "Moderate Speculation",
    Rating.HIGH_SPECULATION:     "High Speculation",
    Rating.MANIA:                "Mania - Danger",
}

_RATING_COLORS: dict[Rating, str] = {
    Rating.SOLID_INVESTMENT:     "green",
    Rating.ACCEPTABLE:           "yellow",
    Rating.MODERATE_SPECULATION: "orange",
    Rating.HIGH_SPECULATION:     "red",
    Rating.MANIA:                "darkred",
}
