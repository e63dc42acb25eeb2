"""
Tests for card_risk/ingestion/card_file.py.

What we test
------------
- A single object and a list of objects both parse.
- metadata.card_id defaults to the top-level card_id.
- is_vintage is inferred from the set identifier when omitted.
- Raw prices keep invalid values for the sanitizer to handle.
- Signals parse into ScoringSignals.
- Every bad record is reported in one CardInputError.
"""

from __future__ import annotations

import json
from datetime import date

import pytest

from card_risk.errors import CardInputError
from card_risk.ingestion.card_file import load_card_file, parse_cards

AS_OF = date(2024, 6, 1)

CARD = {
    "card_id": "base1-4",
    "metadata": {
        "name": "Charizard",
        "rarity": "Rare Holo",
        "set_identifier": "base1",
        "psa_population": 121,
        "active_listings": 40,
        "sold_listings_30d": 25,
    },
    "prices": [
        {"date": "2024-01-01", "price": 420.0},
        {"date": "2024-01-02", "price": 415.5, "recorded_at": "2024-01-02T18:00:00Z"},
        {"date": "2024-01-03", "price": None},
        {"date": "2024-01-04", "price": -1},
    ],
    "signals": {
        "sentiment": {"reddit_mentions": 40, "buy_orders": 12, "sell_orders": 5},
        "macro": {"fear_greed_index": 71, "policy_rate": 4.5},
        "btc_prices": [{"date": "2024-01-01", "price": 42000.0}],
    },
}


def test_single_object():
    cards = parse_cards(CARD, as_of=AS_OF)
    assert len(cards) == 1
    card = cards[0]
    assert card.card_id == "base1-4"
    assert card.metadata.card_id == "base1-4"
    assert card.metadata.is_vintage is True
    assert card.signals.sentiment.buy_orders == 12
    assert card.signals.macro.fear_greed_index == 71
    assert card.signals.btc_prices[0].price == 42000.0


def test_raw_prices_kept_as_is():
    card = parse_cards(CARD, as_of=AS_OF)[0]
    assert [p.price for p in card.prices] == [420.0, 415.5, None, -1.0]
    assert all(p.card_id == "base1-4" for p in card.prices)
    assert card.prices[1].recorded_at is not None


def test_list_of_cards_keeps_order():
    second = {"card_id": "sv3-223", "metadata": {"name": "Charizard ex", "set_identifier": "sv3"}}
    cards = parse_cards([CARD, second], as_of=AS_OF)
    assert [c.card_id for c in cards] == ["base1-4", "sv3-223"]
    assert cards[1].metadata.is_vintage is False
    assert cards[1].prices == []


def test_explicit_vintage_flag_wins():
    record = {"card_id": "sv3-1", "metadata": {"set_identifier": "sv3", "is_vintage": True}}
    assert parse_cards(record, as_of=AS_OF)[0].metadata.is_vintage is True


def test_missing_metadata_is_allowed():
    card = parse_cards({"card_id": "x"}, as_of=AS_OF)[0]
    assert card.metadata.name == ""
    assert card.metadata.is_vintage is False
    assert card.volumes == []


def test_volumes_parsed():
    card = parse_cards({"card_id": "x", "volumes": [14, 9, 11, 31]}, as_of=AS_OF)[0]
    assert card.volumes == [14.0, 9.0, 11.0, 31.0]


class TestErrors:
    def test_missing_card_id(self):
        with pytest.raises(CardInputError, match="card_id is required"):
            parse_cards({"metadata": {}}, as_of=AS_OF)

    def test_all_errors_reported_together(self):
        bad = [
            {"card_id": "a", "metadata": {"psa_population": -3}},
            CARD,
            {"card_id": "b", "prices": [{"date": "not-a-date", "price": 1}]},
            "just a string",
        ]
        with pytest.raises(CardInputError) as exc_info:
            parse_cards(bad, as_of=AS_OF)
        message = str(exc_info.value)
        assert "3 card record(s) failed validation" in message
        assert "Entry 0" in message and "Entry 2" in message and "Entry 3" in message
        assert "Entry 1" not in message

    def test_non_string_set_identifier_is_a_validation_error(self):
        record = {"card_id": "x1", "metadata": {"name": "Foo", "set_identifier": 123}}
        with pytest.raises(CardInputError, match="set_identifier"):
            parse_cards(record, as_of=AS_OF)

    def test_non_string_set_identifier_with_explicit_vintage(self):
        record = {"card_id": "x1", "metadata": {"set_identifier": ["base1"], "is_vintage": True}}
        with pytest.raises(CardInputError, match="1 card record"):
            parse_cards(record, as_of=AS_OF)

    def test_error_list_truncated(self):
        bad = [{"metadata": {}} for _ in range(12)]
        with pytest.raises(CardInputError, match="and 2 more"):
            parse_cards(bad, as_of=AS_OF)


class TestLoadCardFile:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps([CARD]), encoding="utf-8")
        cards = load_card_file(path, as_of=AS_OF)
        assert cards[0].metadata.name == "Charizard"

    def test_missing_file(self, tmp_path):
        with pytest.raises(CardInputError, match="not found"):
            load_card_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CardInputError, match="not valid JSON"):
            load_card_file(path)
