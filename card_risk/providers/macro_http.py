"""
Live macro provider.

Sources
-------
CoinGecko     : ``/coins/bitcoin/market_chart?vs_currency=usd&days=N`` for
                daily BTC prices (one point per UTC date, last value wins).
alternative.me: ``/fng/?limit=1`` for the current Fear & Greed index.

The policy rate has no free API; it comes from configuration. The card/BTC
correlation is left unset, so the growth scorer computes it from the BTC
prices returned here.

HTTP failures raise ``ProviderError``. The engine's ``fetch_signal()``
turns that into an unavailable signal.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

import httpx

from card_risk.config import ProvidersConfig
from card_risk.errors import ProviderError
from card_risk.models.price import PricePoint
from card_risk.models.signals import MacroSignal
from card_risk.providers.http_client import get_json

logger = logging.getLogger(__name__)


def parse_market_chart(payload: dict[str, Any]) -> list[PricePoint]:
    """CoinGecko ``market_chart`` JSON → daily ``PricePoint`` list, ascending."""
    by_date: dict[date, float] = {}
    try:
        for timestamp_ms, price in payload["prices"]:
            day = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date()
            if price is not None and price > 0:
                by_date[day] = float(price)
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError("coingecko", f"unexpected market_chart payload: {exc}") from exc
    return [PricePoint(date=d, price=p) for d, p in sorted(by_date.items())]


def parse_fear_greed(payload: dict[str, Any]) -> float:
    """alternative.me ``/fng/`` JSON → current index value."""
    try:
        return float(payload["data"][0]["value"])
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ProviderError("alternative.me", f"unexpected Fear & Greed payload: {exc}") from exc


class HttpMacroProvider:
    """Fetches BTC history and Fear & Greed concurrently.

    Args:
        config: Provider URLs, timeout, user agent and history length.
        policy_rate: Current policy rate in percent.
        client: Optional shared ``httpx.AsyncClient``. When omitted, one is
            opened per call.
    """

    name = "http-macro"

    def __init__(
        self,
        config: ProvidersConfig,
        policy_rate: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._policy_rate = policy_rate
        self._client = client

    async def get_macro(self, as_of: date) -> Optional[MacroSignal]:
        if self._client is not None:
            return await self._fetch(self._client)
        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            headers={"User-Agent": self._config.user_agent},
        ) as client:
            return await self._fetch(client)

    async def _fetch(self, client: httpx.AsyncClient) -> MacroSignal:
        btc_prices, fear_greed = await asyncio.gather(
            self._fetch_btc_history(client),
            self._fetch_fear_greed(client),
        )
        logger.info(
            "Macro: %d BTC points, Fear & Greed %.0f", len(btc_prices), fear_greed,
        )
        return MacroSignal(
            fear_greed_index=fear_greed,
            policy_rate=self._policy_rate,
            btc_prices=btc_prices,
        )

    async def _fetch_btc_history(self, client: httpx.AsyncClient) -> list[PricePoint]:
        url = f"{self._config.coingecko_url.rstrip('/')}/coins/bitcoin/market_chart"
        params = {"vs_currency": "usd", "days": self._config.btc_history_days}
        payload = await get_json(client, "coingecko", url, params)
        return parse_market_chart(payload)

    async def _fetch_fear_greed(self, client: httpx.AsyncClient) -> float:
        payload = await get_json(client, "alternative.me", self._config.fear_greed_url, {"limit": 1})
        return parse_fear_greed(payload)
