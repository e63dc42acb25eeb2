"""
Tests for card_risk/utils/time_utils.py.

What we test
------------
- parse_date() accepts plain dates and ISO datetimes (including ``Z``).
- Blank input parses to None; garbage raises ValueError.
- as_of_datetime() is midnight UTC on the given date.
"""

from __future__ import annotations

from datetime import date, timezone

import pytest

from card_risk.utils.time_utils import as_of_datetime, parse_date, utcnow


class TestParseDate:
    def test_plain_date(self):
        assert parse_date("2024-03-01") == date(2024, 3, 1)

    def test_datetime_with_z(self):
        assert parse_date("2024-03-01T23:15:00Z") == date(2024, 3, 1)

    def test_surrounding_whitespace(self):
        assert parse_date("  2024-03-01 ") == date(2024, 3, 1)

    @pytest.mark.parametrize("value", [None, ""])
    def test_blank_is_none(self, value):
        assert parse_date(value) is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_date("yesterday")


def test_as_of_datetime_midnight_utc():
    stamp = as_of_datetime(date(2024, 11, 15))
    assert (stamp.hour, stamp.minute, stamp.second) == (0, 0, 0)
    assert stamp.tzinfo == timezone.utc


def test_utcnow_is_aware():
    assert utcnow().tzinfo is not None
