"""
Live sentiment provider backed by Reddit's public JSON listings.

For each configured subreddit the provider reads ``/r/<sub>/new.json`` and
keeps the posts whose title or body mention the card name. Each matching
post is classified by keyword polarity:

    positive  more than one positive keyword ahead of the negatives
    negative  more than one negative keyword ahead of the positives
    neutral   anything else

Positive posts count as buy pressure and negative posts as sell pressure,
which gives the sentiment scorer its buyer/seller ratio. Reddit has no
search-volume trend, so ``search_volume_change`` stays unset.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from card_risk.config import ProvidersConfig
from card_risk.errors import ProviderError
from card_risk.models.card import CardMetadata
from card_risk.models.signals import SentimentSignal
from card_risk.providers.http_client import get_json

logger = logging.getLogger(__name__)

POSTS_PER_SUBREDDIT = 50

_WORD_RE = re.compile(r"[a-z0-9]+")

POSITIVE_WORDS = frozenset({
    "buy", "buying", "bought", "invest", "investment", "undervalued", "gem",
    "amazing", "beautiful", "grail", "love", "great", "awesome", "fire",
    "hold", "holding", "moon", "pump", "gain", "profit", "rare", "chase",
    "hit", "pull", "excited", "slab", "psa10", "cgc10", "bgs10", "mint",
    "perfect", "centering",
})

NEGATIVE_WORDS = frozenset({
    "sell", "selling", "sold", "dump", "crash", "overpriced", "bubble",
    "scam", "fake", "reprint", "avoid", "loss", "losing", "regret", "drop",
    "falling", "manipulation", "manipulated", "worthless", "worried",
    "concern", "risky", "hype", "fomo", "overpay", "overpaid", "damaged",
    "counterfeit",
})


@dataclass(frozen=True)
class RedditPost:
    title: str
    selftext: str
    subreddit: str


def classify_polarity(text: str) -> str:
    """Return ``"positive"``, ``"negative"`` or ``"neutral"``.

    Keywords match whole words only and each counts once per post.
    """
    words = set(_WORD_RE.findall(text.lower()))
    positive = len(words & POSITIVE_WORDS)
    negative = len(words & NEGATIVE_WORDS)
    if positive > negative + 1:
        return "positive"
    if negative > positive + 1:
        return "negative"
    return "neutral"


def parse_listing(payload: Any) -> list[RedditPost]:
    """Reddit listing JSON → posts."""
    try:
        children = payload["data"]["children"]
        return [
            RedditPost(
                title=child["data"].get("title") or "",
                selftext=child["data"].get("selftext") or "",
                subreddit=child["data"].get("subreddit") or "",
            )
            for child in children
        ]
    except (KeyError, TypeError) as exc:
        raise ProviderError("reddit", f"unexpected listing payload: {exc}") from exc


class RedditSentimentProvider:
    """Counts card mentions and polarity across a set of subreddits."""

    name = "reddit"

    def __init__(
        self,
        config: ProvidersConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._client = client

    async def get_sentiment(self, metadata: CardMetadata) -> Optional[SentimentSignal]:
        if not metadata.name.strip():
            return None
        if self._client is not None:
            posts = await self._fetch_posts(self._client)
        else:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                headers={"User-Agent": self._config.user_agent},
            ) as client:
                posts = await self._fetch_posts(client)
        return summarise_mentions(metadata.name, posts)

    async def _fetch_posts(self, client: httpx.AsyncClient) -> list[RedditPost]:
        base = self._config.reddit_url.rstrip("/")
        listings = await asyncio.gather(*(
            get_json(client, "reddit", f"{base}/r/{sub}/new.json", {"limit": POSTS_PER_SUBREDDIT})
            for sub in self._config.subreddits
        ))
        posts: list[RedditPost] = []
        for listing in listings:
            posts.extend(parse_listing(listing))
        logger.debug("Reddit: %d posts across %d subreddits", len(posts), len(listings))
        return posts


def summarise_mentions(card_name: str, posts: list[RedditPost]) -> SentimentSignal:
    """Build a ``SentimentSignal`` from the posts that mention ``card_name``."""
    needle = card_name.strip().lower()
    matching = [
        p for p in posts
        if needle in p.title.lower() or needle in p.selftext.lower()
    ]
    positive = 0
    negative = 0
    for post in matching:
        polarity = classify_polarity(f"{post.title} {post.selftext}")
        if polarity == "positive":
            positive += 1
        elif polarity == "negative":
            negative += 1

    return SentimentSignal(
        reddit_mentions=len(matching),
        buy_orders=positive if matching else None,
        sell_orders=negative if matching else None,
    )
