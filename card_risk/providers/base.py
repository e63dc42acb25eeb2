"""
Provider interfaces and the signal-fetching boundary.

Every provider method is async and returns its payload, or ``None`` when it
has nothing for the card. ``fetch_signal()`` wraps one call with a timeout
and turns every outcome (value, ``None``, timeout, exception) into a
``Signal`` so that one failing provider degrades only its own dimension.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Optional, Protocol, TypeVar

from card_risk.models.card import CardMetadata
from card_risk.models.price import RawPricePoint
from card_risk.models.signals import (
    MacroSignal,
    PopulationSignal,
    SentimentSignal,
    Signal,
    SignalStatus,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ── Protocols ─────────────────────────────────────────────────────────────────

class PriceHistoryProvider(Protocol):
    async def get_price_history(self, card_id: str) -> list[RawPricePoint]: ...


class MetadataProvider(Protocol):
    async def get_metadata(self, card_id: str) -> Optional[CardMetadata]: ...


class PopulationProvider(Protocol):
    async def get_population(self, metadata: CardMetadata) -> Optional[PopulationSignal]: ...


class SentimentProvider(Protocol):
    async def get_sentiment(self, metadata: CardMetadata) -> Optional[SentimentSignal]: ...


class MacroProvider(Protocol):
    async def get_macro(self, as_of: date) -> Optional[MacroSignal]: ...


@dataclass(frozen=True)
class ProviderSet:
    """The providers available to one scoring run. Any may be ``None``."""

    population: Optional[PopulationProvider] = None
    sentiment: Optional[SentimentProvider] = None
    macro: Optional[MacroProvider] = None


# ── Fetch boundary ────────────────────────────────────────────────────────────

async def fetch_signal(
    source: str,
    call: Optional[Awaitable[Optional[T]]],
    timeout_seconds: float,
) -> Signal[T]:
    """Await one provider call under a timeout and wrap the outcome.

    Args:
        source: Provider name for logs and the resulting ``Signal``.
        call: The provider coroutine, or ``None`` when no provider is set.
        timeout_seconds: Per-call deadline.

    Returns:
        ``Signal.available(value)`` on success; ``Signal.unavailable(...)``
        with status ``unavailable``, ``timeout`` or ``error`` otherwise.
        Never raises.
    """
    if call is None:
        return Signal.unavailable("no provider configured", source=source)

    try:
        value = await asyncio.wait_for(call, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(
            "Provider %s timed out after %.1fs", source, timeout_seconds,
            extra={"provider": source, "status": "timeout"},
        )
        return Signal.unavailable(
            f"timed out after {timeout_seconds:g}s",
            status=SignalStatus.TIMEOUT,
            source=source,
        )
    except Exception as exc:
        logger.warning(
            "Provider %s failed: %s", source, exc,
            extra={"provider": source, "status": "error"},
        )
        return Signal.unavailable(str(exc) or type(exc).__name__, status=SignalStatus.ERROR, source=source)

    if value is None:
        logger.debug("Provider %s returned no data", source)
        return Signal.unavailable("provider returned no data", source=source)
    return Signal.available(value, source=source)
