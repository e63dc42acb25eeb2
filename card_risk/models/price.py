"""
Price series models — raw observations, validated points, sanitized series.

Three-stage design:
  1. ``RawPricePoint``       — an observation exactly as received upstream;
                               price may be missing, zero, negative or NaN.
  2. ``PricePoint``          — a validated ``{date, price}`` pair, the contract
                               every scorer consumes.
  3. ``SanitizedPricePoint`` — a cleaned point carrying outlier and
                               interpolation flags; ``SanitizedSeries`` holds
                               the full cleaned series.

All models are frozen (immutable) after construction.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class PricePoint(BaseModel):
    """One daily price for a card.

    Attributes:
        date: Calendar date of the observation.
        price: Non-negative, finite price. Zero is tolerated and treated as
            absent by the scorers.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    price: float

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        if math.isnan(v) or math.isinf(v):
            raise ValueError("price must be a finite number.")
        if v < 0:
            raise ValueError("price must be non-negative.")
        return v


class RawPricePoint(BaseModel):
    """An unvalidated price observation as delivered by a price provider.

    Attributes:
        card_id: Card the observation belongs to, if the feed is multi-card.
        date: Calendar date the price applies to.
        price: Observed price; may be ``None``, zero, negative or NaN.
        recorded_at: When the observation was recorded; used to keep the
            most recent entry when two share a date.
    """

    model_config = ConfigDict(frozen=True)

    card_id: Optional[str] = None
    date: dt.date
    price: Optional[float] = None
    recorded_at: Optional[dt.datetime] = None

    @property
    def is_valid(self) -> bool:
        """True if the price is a finite, strictly positive number."""
        return (
            self.price is not None
            and not math.isnan(self.price)
            and not math.isinf(self.price)
            and self.price > 0
        )


class SanitizedPricePoint(BaseModel):
    """A cleaned price point with data-quality flags.

    Attributes:
        date: Calendar date.
        price: Observed or interpolated price.
        is_outlier: ``True`` if the observed price lies farther than the
            configured number of standard deviations from the series mean.
            Outliers are flagged, never removed.
        is_interpolated: ``True`` if the point was synthesised to fill a gap.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    price: float
    is_outlier: bool = False
    is_interpolated: bool = False

    def to_price_point(self) -> PricePoint:
        return PricePoint(date=self.date, price=self.price)


class SanitizedSeries(BaseModel):
    """Result of ``sanitize_price_series()``.

    Attributes:
        points: Cleaned points, ascending by date, one per date.
        duplicates_removed: Same-date entries discarded during dedup.
        invalid_dropped: Entries dropped for missing / non-positive / NaN prices.
    """

    model_config = ConfigDict(frozen=True)

    points: list[SanitizedPricePoint] = []
    duplicates_removed: int = 0
    invalid_dropped: int = 0

    @property
    def cleaned_series(self) -> list[PricePoint]:
        """All points (observed and interpolated) as plain ``PricePoint``s."""
        return [p.to_price_point() for p in self.points]

    @property
    def observed_series(self) -> list[PricePoint]:
        """Only points that were actually observed (interpolated excluded)."""
        return [p.to_price_point() for p in self.points if not p.is_interpolated]

    @property
    def outlier_flags(self) -> list[bool]:
        return [p.is_outlier for p in self.points]

    @property
    def interpolated_flags(self) -> list[bool]:
        return [p.is_interpolated for p in self.points]

    @property
    def outlier_count(self) -> int:
        return sum(self.outlier_flags)

    @property
    def interpolated_count(self) -> int:
        return sum(self.interpolated_flags)
