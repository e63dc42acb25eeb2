"""Shared HTTP helper for the live providers."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from card_risk.errors import ProviderError


async def get_json(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    params: Optional[dict[str, Any]] = None,
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises:
        ProviderError: On transport errors, non-2xx status or invalid JSON.
    """
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPStatusError as exc:
        raise ProviderError(provider, f"HTTP {exc.response.status_code} from {url}") from exc
    except httpx.HTTPError as exc:
        raise ProviderError(provider, f"request failed: {exc}") from exc
    except ValueError as exc:
        raise ProviderError(provider, f"invalid JSON: {exc}") from exc
