"""
Card metadata model — the immutable per-run snapshot the scorers read.

``CardMetadata`` carries everything about a card except its price history:
rarity, set, vintage status, graded population and listing activity. It has
no persistence lifecycle inside the engine.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class CardMetadata(BaseModel):
    """Metadata snapshot for one card.

    Attributes:
        card_id: Stable card identifier (e.g. ``"base1-4"``).
        name: Display name, e.g. ``"Charizard"``. Also used to detect naming
            conventions that imply rarity ("Shining", "EX", "Gold Star").
        rarity: Free-text rarity label, or ``None`` if unknown.
        set_identifier: Set code used to estimate the release year.
        is_vintage: Older print era; changes the growth benchmark and the
            recommendation in the acceptable band.
        psa_population: PSA-10 graded population, or ``None`` if unknown.
        active_listings: Currently active marketplace listings.
        sold_listings_30d: Listings sold over the last 30 days.
        is_graded: Whether the scored copy is a graded slab.
        grade: Numeric grade (0–10) when graded.
    """

    model_config = ConfigDict(frozen=True)

    card_id: str
    name: str = ""
    rarity: Optional[str] = None
    set_identifier: str = ""
    is_vintage: bool = False
    psa_population: Optional[int] = None
    active_listings: Optional[int] = None
    sold_listings_30d: Optional[int] = None
    is_graded: bool = False
    grade: Optional[float] = None

    @field_validator("card_id")
    @classmethod
    def validate_card_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("card_id must not be empty.")
        return v

    @field_validator("psa_population", "active_listings", "sold_listings_30d")
    @classmethod
    def validate_counts_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Population and listing counts must be non-negative.")
        return v

    @field_validator("grade")
    @classmethod
    def validate_grade(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 10.0:
            raise ValueError(f"grade must be in [0, 10], got {v}.")
        return v
