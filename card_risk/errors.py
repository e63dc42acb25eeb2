"""
Exception hierarchy for the card risk engine.

Scoring itself does not raise on thin or missing data: each dimension has a
documented degraded value. These exceptions cover the edges: bad
configuration, unreadable input files, and provider failures (which the
engine converts into unavailable signals before they reach a scorer).
"""

from __future__ import annotations


class CardRiskError(Exception):
    """Base class for all card_risk errors."""


class ConfigurationError(CardRiskError, ValueError):
    """Static configuration is inconsistent (weights, rating bands, ...)."""


class CardInputError(CardRiskError):
    """A card input file or record could not be parsed or validated."""


class ProviderError(CardRiskError):
    """An external data provider failed to return a usable response.

    Attributes:
        provider: Short provider name, e.g. ``"coingecko"``.
    """

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
