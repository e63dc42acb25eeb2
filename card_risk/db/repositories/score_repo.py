"""
Repository for ``speculation_scores``.

Writes are upserts keyed by ``card_id``: each card's row is independent, so
batch workers can persist in any order without coordination.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from card_risk.db.repositories.base import BaseRepository
from card_risk.models.score import FullSpeculationScore
from card_risk.taxonomy.rating_taxonomy import Dimension, Rating, Recommendation

logger = logging.getLogger(__name__)


class StoredScore(BaseModel):
    """A persisted score row, as read back for listings."""

    model_config = ConfigDict(frozen=True)

    card_id: str
    card_name: str
    total_score: int
    rating: Rating
    recommendation: Recommendation
    dimension_scores: dict[Dimension, float]
    degraded_dimensions: list[Dimension]
    summary: str
    computed_at: Optional[str]


class ScoreRepository(BaseRepository):
    """Read/write access to persisted speculation scores."""

    table = "speculation_scores"

    def upsert(self, score: FullSpeculationScore) -> None:
        """Insert or replace the row for ``score.card_id``."""
        details = {d.dimension.value: d.details for d in score.dimensions()}
        self.execute(
            """
            INSERT INTO speculation_scores (
                card_id, card_name, total_score, rating, recommendation,
                volatility_score, growth_score, scarcity_score,
                sentiment_score, macro_score,
                degraded_dimensions, details_json, summary, computed_at,
                updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                      strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
            ON CONFLICT(card_id) DO UPDATE SET
                card_name           = excluded.card_name,
                total_score         = excluded.total_score,
                rating              = excluded.rating,
                recommendation      = excluded.recommendation,
                volatility_score    = excluded.volatility_score,
                growth_score        = excluded.growth_score,
                scarcity_score      = excluded.scarcity_score,
                sentiment_score     = excluded.sentiment_score,
                macro_score         = excluded.macro_score,
                degraded_dimensions = excluded.degraded_dimensions,
                details_json        = excluded.details_json,
                summary             = excluded.summary,
                computed_at         = excluded.computed_at,
                updated_at          = excluded.updated_at;
            """,
            (
                score.card_id,
                score.card_name,
                score.total_score,
                score.rating.value,
                score.recommendation.value,
                score.volatility.score,
                score.growth.score,
                score.scarcity.score,
                score.sentiment.score,
                score.macro.score,
                self.to_json([d.value for d in score.degraded_dimensions]),
                self.to_json(details),
                score.summary,
                score.computed_at.isoformat() if score.computed_at else None,
            ),
        )
        logger.debug("Upserted score for %s: %d", score.card_id, score.total_score)

    def get(self, card_id: str) -> Optional[StoredScore]:
        row = self.fetchone(
            "SELECT * FROM speculation_scores WHERE card_id = ?;", (card_id,)
        )
        return _row_to_stored(row) if row is not None else None

    def list_top(self, limit: int = 20, rating: Optional[Rating] = None) -> list[StoredScore]:
        """Highest-scoring (most speculative) cards first.

        Args:
            limit: Maximum rows to return.
            rating: Only return cards in this band.
        """
        if rating is None:
            rows = self.fetchall(
                "SELECT * FROM speculation_scores ORDER BY total_score DESC, card_id LIMIT ?;",
                (limit,),
            )
        else:
            rows = self.fetchall(
                """
                SELECT * FROM speculation_scores
                WHERE rating = ?
                ORDER BY total_score DESC, card_id
                LIMIT ?;
                """,
                (rating.value, limit),
            )
        return [_row_to_stored(r) for r in rows]


def _row_to_stored(row) -> StoredScore:
    return StoredScore(
        card_id=row["card_id"],
        card_name=row["card_name"],
        total_score=row["total_score"],
        rating=Rating(row["rating"]),
        recommendation=Recommendation(row["recommendation"]),
        dimension_scores={
            Dimension.VOLATILITY: row["volatility_score"],
            Dimension.GROWTH:     row["growth_score"],
            Dimension.SCARCITY:   row["scarcity_score"],
            Dimension.SENTIMENT:  row["sentiment_score"],
            Dimension.MACRO:      row["macro_score"],
        },
        degraded_dimensions=[
            Dimension(d) for d in BaseRepository.from_json(row["degraded_dimensions"], [])
        ],
        summary=row["summary"],
        computed_at=row["computed_at"],
    )
