"""
Date helpers shared by the sanitizer, the scorers and the CLI.

All scoring is keyed on calendar dates (``datetime.date``); wall-clock time
only appears in ``computed_at`` stamps and in dedup tie-breaking.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def today_utc() -> date:
    """Current calendar date in UTC."""
    return utcnow().date()


def as_of_datetime(as_of: date) -> datetime:
    """Midnight UTC on ``as_of``; used as a reproducible ``computed_at``."""
    return datetime(as_of.year, as_of.month, as_of.day, tzinfo=timezone.utc)


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` string (or full ISO datetime) into a date.

    Returns ``None`` for ``None`` / empty input.

    Raises:
        ValueError: If the string is not an ISO date or datetime.
    """
    if not value:
        return None
    value = value.strip()
    if len(value) == 10:
        return date.fromisoformat(value)
    return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
