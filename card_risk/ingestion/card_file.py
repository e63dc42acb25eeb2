"""
JSON card file parser.

A file holds one card object or an array of them::

    {
      "card_id": "base1-4",
      "metadata": {
        "name": "Charizard",
        "rarity": "Rare Holo",
        "set_identifier": "base1",
        "psa_population": 121,
        "active_listings": 40,
        "sold_listings_30d": 25
      },
      "prices": [
        {"date": "2024-01-01", "price": 420.0},
        {"date": "2024-01-02", "price": 415.5, "recorded_at": "2024-01-02T18:00:00Z"}
      ],
      "signals": {
        "sentiment": {"reddit_mentions": 40, "buy_orders": 12, "sell_orders": 5},
        "macro": {"fear_greed_index": 71, "policy_rate": 4.5},
        "population": {"psa10_population": 121},
        "btc_prices": [{"date": "2024-01-01", "price": 42000.0}]
      },
      "volumes": [14, 9, 11, 31]
    }

``volumes`` is optional: per-period sales counts, oldest first, with the
last entry as the current period. Only the rebound technicals read it.

``metadata.card_id`` defaults to the top-level ``card_id``. When
``metadata.is_vintage`` is omitted it is inferred from the set identifier.
Prices are kept raw (missing, zero or negative values allowed); the
sanitizer deals with them.

All records are validated before any is returned. Any failure raises a
single ``CardInputError`` listing the first 10 problems.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from card_risk.errors import CardInputError
from card_risk.models.card import CardMetadata
from card_risk.models.price import RawPricePoint
from card_risk.models.signals import ScoringSignals
from card_risk.scoring.scarcity import is_vintage_set
from card_risk.utils.time_utils import today_utc

logger = logging.getLogger(__name__)

_MAX_ERRORS_SHOWN = 10


class CardInput(BaseModel):
    """One card ready for scoring."""

    model_config = ConfigDict(frozen=True)

    card_id: str
    metadata: CardMetadata
    prices: list[RawPricePoint] = []
    signals: ScoringSignals = ScoringSignals()
    volumes: list[float] = []


def load_card_file(path: Path, as_of: Optional[date] = None) -> list[CardInput]:
    """Parse a JSON card file.

    Args:
        path: File holding one card object or a list of them.
        as_of: Reference date for vintage inference. Defaults to today (UTC).

    Returns:
        Validated ``CardInput`` records in file order.

    Raises:
        CardInputError: If the file is missing, is not JSON, or any record
            fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise CardInputError(f"Card file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as exc:
        raise CardInputError(f"{path.name} is not valid JSON: {exc}") from exc

    cards = parse_cards(payload, as_of=as_of, source=path.name)
    logger.info("Parsed %d card(s) from %s", len(cards), path.name)
    return cards


def parse_cards(
    payload: Any,
    as_of: Optional[date] = None,
    source: str = "<input>",
) -> list[CardInput]:
    """Validate already-decoded JSON (object or list of objects)."""
    as_of = as_of or today_utc()
    records = payload if isinstance(payload, list) else [payload]

    cards: list[CardInput] = []
    errors: list[tuple[int, str]] = []
    for i, record in enumerate(records):
        try:
            cards.append(_record_to_card_input(record, as_of))
        except (TypeError, ValueError, ValidationError) as exc:
            label = record.get("card_id", f"#{i}") if isinstance(record, dict) else f"#{i}"
            errors.append((i, f"{label}: {exc}"))

    if errors:
        detail = "\n".join(f"  Entry {i}: {msg}" for i, msg in errors[:_MAX_ERRORS_SHOWN])
        extra = len(errors) - _MAX_ERRORS_SHOWN
        suffix = f"\n  … and {extra} more" if extra > 0 else ""
        raise CardInputError(
            f"{len(errors)} card record(s) failed validation in {source}:\n{detail}{suffix}"
        )
    return cards


# ── Private helpers ────────────────────────────────────────────────────────────

def _record_to_card_input(record: Any, as_of: date) -> CardInput:
    if not isinstance(record, dict):
        raise ValueError(f"expected a JSON object, got {type(record).__name__}")

    card_id = str(record.get("card_id") or "").strip()
    if not card_id:
        raise ValueError("card_id is required")

    meta_raw: dict[str, Any] = dict(record.get("metadata") or {})
    meta_raw.setdefault("card_id", card_id)
    infer_vintage = meta_raw.get("is_vintage") is None
    if infer_vintage:
        meta_raw.pop("is_vintage", None)
    metadata = CardMetadata(**meta_raw)
    if infer_vintage:
        # Validated first so a malformed set_identifier is a field error.
        metadata = metadata.model_copy(
            update={"is_vintage": is_vintage_set(metadata.set_identifier, as_of)}
        )

    prices = [
        RawPricePoint(card_id=card_id, **_price_fields(p))
        for p in record.get("prices") or []
    ]
    signals = ScoringSignals(**(record.get("signals") or {}))

    return CardInput(
        card_id=card_id,
        metadata=metadata,
        prices=prices,
        signals=signals,
        volumes=record.get("volumes") or [],
    )


def _price_fields(entry: Any) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(f"price entries must be objects, got {type(entry).__name__}")
    return {k: entry.get(k) for k in ("date", "price", "recorded_at") if k in entry}
