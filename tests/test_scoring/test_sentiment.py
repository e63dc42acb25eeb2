"""Tests for card_risk/scoring/sentiment.py."""

from __future__ import annotations

import pytest

from card_risk.models.signals import SentimentSignal
from card_risk.scoring.sentiment import (
    get_buyer_seller_score,
    get_influencer_score,
    get_popularity_bonus,
    hype_index_to_score,
    score_sentiment,
    social_buzz_to_score,
    weighted_mentions,
)
from card_risk.taxonomy.rating_taxonomy import Dimension


def test_weighted_mentions():
    signal = SentimentSignal(
        reddit_mentions=10, twitter_mentions=10, youtube_mentions=10, discord_mentions=10,
    )
    assert weighted_mentions(signal) == pytest.approx(45.0)


@pytest.mark.parametrize(
    "mentions, expected",
    [(0, 10.0), (9.9, 10.0), (10, 25.0), (49.9, 25.0), (50, 50.0), (199, 50.0),
     (200, 75.0), (999, 75.0), (1000, 100.0)],
)
def test_social_buzz_buckets(mentions, expected):
    assert social_buzz_to_score(mentions) == expected


@pytest.mark.parametrize(
    "buy, sell, expected",
    [
        (None, 5, 50.0),
        (5, None, 50.0),
        (3, 0, 100.0),
        (0, 0, 50.0),
        (1, 4, 10.0),
        (3, 4, 30.0),
        (4, 4, 50.0),
        (8, 4, 75.0),
        (20, 4, 100.0),
    ],
)
def test_buyer_seller(buy, sell, expected):
    assert get_buyer_seller_score(buy, sell) == expected


@pytest.mark.parametrize(
    "change, expected",
    [(None, 30.0), (-50.0, 10.0), (-20.0, 30.0), (0.0, 30.0), (20.0, 60.0),
     (99.0, 60.0), (100.0, 85.0), (299.0, 85.0), (300.0, 100.0)],
)
def test_hype_index(change, expected):
    assert hype_index_to_score(change) == expected


@pytest.mark.parametrize(
    "name, expected",
    [("Charizard", 30.0), ("Dark Blastoise", 20.0), ("Snorlax VMAX", 10.0), ("Magikarp", 0.0)],
)
def test_popularity_bonus(name, expected):
    assert get_popularity_bonus(name) == expected


class TestInfluencerScore:
    def test_hype_rarity(self):
        assert get_influencer_score("Special Art Rare", False, None) == 30.0

    def test_graded_gem_mint(self):
        assert get_influencer_score("Rare", True, 10.0) == 40.0

    def test_graded_nine(self):
        assert get_influencer_score(None, True, 9.0) == 30.0

    def test_capped_at_50(self):
        assert get_influencer_score("Secret Rare", True, 10.0) == 50.0

    def test_ungraded_plain(self):
        assert get_influencer_score("Rare", False, 10.0) == 0.0


def test_full_example(make_metadata):
    signal = SentimentSignal(reddit_mentions=100, buy_orders=8, sell_orders=4, search_volume_change=150.0)
    metadata = make_metadata(rarity="Special Art Rare", is_graded=False)
    result = score_sentiment(signal, metadata)
    # 0.3*50 + 0.25*75 + 0.25*85 + 0.2*90
    assert result.dimension == Dimension.SENTIMENT
    assert result.score == pytest.approx(73.0)
    assert result.degraded is False
    assert result.details["popularity_score"] == 90.0


def test_missing_signal_is_neutral_and_degraded(make_metadata):
    result = score_sentiment(None, make_metadata(), unavailable_reason="timed out after 5s")
    assert result.score == 50.0
    assert result.degraded is True
    assert result.details["unavailable_reason"] == "timed out after 5s"


def test_missing_signal_default_reason(make_metadata):
    result = score_sentiment(None, make_metadata())
    assert result.details["unavailable_reason"] == "no sentiment signal"


def test_popularity_capped_at_100(make_metadata):
    signal = SentimentSignal()
    metadata = make_metadata(rarity="Secret Rare", is_graded=True, grade=10.0)
    result = score_sentiment(signal, metadata)
    # 30 + 30 + 50 capped
    assert result.details["popularity_score"] == 100.0
