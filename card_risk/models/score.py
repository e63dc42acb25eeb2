"""
Score output models.

``DimensionScore`` is one sub-score with its weight and diagnostic details.
``FullSpeculationScore`` aggregates the five dimensions with the total,
rating, recommendation and summary.

Both are frozen and created fresh by every scoring call. A full score has no
identity beyond the inputs that produced it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from card_risk.taxonomy.rating_taxonomy import Dimension, Rating, Recommendation

DetailValue = Union[bool, int, float, str, None]


class DimensionScore(BaseModel):
    """Sub-score for one dimension.

    Attributes:
        dimension: Which axis this score belongs to.
        score: Sub-score in [0, 100].
        weight: Fixed dimension weight.
        details: Named sub-metric values (raw metrics and bucket scores).
        degraded: ``True`` if a default replaced missing input data.
    """

    model_config = ConfigDict(frozen=True)

    dimension: Dimension
    score: float
    weight: float
    details: dict[str, DetailValue] = {}
    degraded: bool = False

    @field_validator("score")
    @classmethod
    def validate_score_range(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"score must be in [0, 100], got {v}.")
        return v

    @property
    def weighted(self) -> float:
        return self.score * self.weight


class FullSpeculationScore(BaseModel):
    """Complete five-dimension speculation assessment for one card."""

    model_config = ConfigDict(frozen=True)

    card_id: str
    card_name: str = ""
    total_score: int
    rating: Rating
    rating_label: str
    rating_color: str
    recommendation: Recommendation
    summary: str
    volatility: DimensionScore
    growth: DimensionScore
    scarcity: DimensionScore
    sentiment: DimensionScore
    macro: DimensionScore
    degraded_dimensions: list[Dimension] = []
    computed_at: Optional[datetime] = None

    @field_validator("total_score")
    @classmethod
    def validate_total_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"total_score must be in [0, 100], got {v}.")
        return v

    def dimensions(self) -> tuple[DimensionScore, ...]:
        """The five dimension scores in canonical order."""
        return (self.volatility, self.growth, self.scarcity, self.sentiment, self.macro)
