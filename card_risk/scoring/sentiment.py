"""
D4 — Sentiment scorer.

Sub-metrics
-----------
social_buzz_score:
    Weighted weekly mentions (Reddit ×1.0, Twitter ×1.2, YouTube ×1.5,
    Discord ×0.8): <10 → 10, <50 → 25, <200 → 50, <1000 → 75, else 100.

buyer_seller_score:
    buy / sell orders: <0.5 → 10, <1 → 30, <2 → 50, <5 → 75, else 100.
    No sell orders → 100 if anyone is buying, else 50. Unknown → 50.

hype_index_score:
    Week-over-week search volume change (%): <-20 → 10, <20 → 30,
    <100 → 60, <300 → 85, else 100. Unknown is read as flat (0%).

popularity:
    30 + name bonus (30 / 20 / 10 by tier) + influencer score (hype
    rarities +30, graded +20, grade 10 +20 or grade 9+ +10, capped at 50),
    capped at 100.

Score formula
-------------
    d4 = 0.3 × buzz + 0.25 × buyer_seller + 0.25 × hype + 0.2 × popularity

When no sentiment signal is available the dimension is the neutral 50 and
is marked degraded.
"""

from __future__ import annotations

from typing import Optional

from card_risk.models.card import CardMetadata
from card_risk.models.score import DimensionScore
from card_risk.models.signals import SentimentSignal
from card_risk.scoring.stats import clamp
from card_risk.scoring.weights import weight_of
from card_risk.taxonomy.rating_taxonomy import Dimension

NEUTRAL_SENTIMENT_SCORE = 50.0

_MENTION_WEIGHTS = {
    "reddit":  1.0,
    "twitter": 1.2,
    "youtube": 1.5,
    "discord": 0.8,
}

_POPULARITY_TIERS: list[tuple[tuple[str, ...], float]] = [
    (("charizard", "pikachu", "mewtwo", "mew", "gengar", "umbreon", "rayquaza"), 30.0),
    (("eevee", "dragonite", "blastoise", "venusaur", "lugia", "ho-oh", "garchomp", "lucario"), 20.0),
    (("gyarados", "arcanine", "lapras", "snorlax", "espeon", "tyranitar", "salamence"), 10.0),
]

_HYPE_RARITIES = ("secret", "rainbow", "ultra", "special art", "illustration rare")


def weighted_mentions(signal: SentimentSignal) -> float:
    return (
        signal.reddit_mentions * _MENTION_WEIGHTS["reddit"]
        + signal.twitter_mentions * _MENTION_WEIGHTS["twitter"]
        + signal.youtube_mentions * _MENTION_WEIGHTS["youtube"]
        + signal.discord_mentions * _MENTION_WEIGHTS["discord"]
    )


def social_buzz_to_score(mentions: float) -> float:
    if mentions < 10:
        return 10.0
    if mentions < 50:
        return 25.0
    if mentions < 200:
        return 50.0
    if mentions < 1000:
        return 75.0
    return 100.0


def get_buyer_seller_score(buy_orders: Optional[int], sell_orders: Optional[int]) -> float:
    if buy_orders is None or sell_orders is None:
        return NEUTRAL_SENTIMENT_SCORE
    if sell_orders == 0:
        return 100.0 if buy_orders > 0 else NEUTRAL_SENTIMENT_SCORE

    ratio = buy_orders / sell_orders
    if ratio < 0.5:
        return 10.0
    if ratio < 1:
        return 30.0
    if ratio < 2:
        return 50.0
    if ratio < 5:
        return 75.0
    return 100.0


def hype_index_to_score(search_volume_change: Optional[float]) -> float:
    change = 0.0 if search_volume_change is None else search_volume_change
    if change < -20:
        return 10.0
    if change < 20:
        return 30.0
    if change < 100:
        return 60.0
    if change < 300:
        return 85.0
    return 100.0


def get_popularity_bonus(name: str) -> float:
    """Bonus for names collectors recognise instantly."""
    lowered = name.lower()
    for names, bonus in _POPULARITY_TIERS:
        if any(n in lowered for n in names):
            return bonus
    return 0.0


def get_influencer_score(
    rarity: Optional[str],
    is_graded: bool,
    grade: Optional[float],
) -> float:
    score = 0.0
    if rarity and any(r in rarity.lower() for r in _HYPE_RARITIES):
        score += 30.0
    if is_graded:
        score += 20.0
        if grade is not None and grade >= 10:
            score += 20.0
        elif grade is not None and grade >= 9:
            score += 10.0
    return min(50.0, score)


def score_sentiment(
    signal: Optional[SentimentSignal],
    metadata: CardMetadata,
    unavailable_reason: Optional[str] = None,
) -> DimensionScore:
    """Score social and order-book speculation pressure.

    Args:
        signal: Sentiment data, or ``None`` when the provider had nothing.
        metadata: Card snapshot; name, rarity and grade feed the popularity
            component.
        unavailable_reason: Why ``signal`` is missing, recorded in details.

    Returns:
        ``DimensionScore`` for ``Dimension.SENTIMENT``.
    """
    if signal is None:
        return DimensionScore(
            dimension=Dimension.SENTIMENT,
            score=NEUTRAL_SENTIMENT_SCORE,
            weight=weight_of(Dimension.SENTIMENT),
            details={"unavailable_reason": unavailable_reason or "no sentiment signal"},
            degraded=True,
        )

    mentions = weighted_mentions(signal)
    buzz = social_buzz_to_score(mentions)
    buyer_seller = get_buyer_seller_score(signal.buy_orders, signal.sell_orders)
    hype = hype_index_to_score(signal.search_volume_change)
    popularity_bonus = get_popularity_bonus(metadata.name)
    influencer = get_influencer_score(metadata.rarity, metadata.is_graded, metadata.grade)
    popularity = min(100.0, 30.0 + popularity_bonus + influencer)

    total = 0.3 * buzz + 0.25 * buyer_seller + 0.25 * hype + 0.2 * popularity

    return DimensionScore(
        dimension=Dimension.SENTIMENT,
        score=clamp(total, 0.0, 100.0),
        weight=weight_of(Dimension.SENTIMENT),
        details={
            "weighted_mentions": round(mentions, 4),
            "social_buzz_score": buzz,
            "buyer_seller_score": buyer_seller,
            "hype_index_score": hype,
            "popularity_bonus": popularity_bonus,
            "influencer_score": influencer,
            "popularity_score": popularity,
        },
    )
