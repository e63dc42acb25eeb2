"""
D3 — Scarcity scorer.

Sub-metrics
-----------
rarity_score:
    Lookup of the card's rarity label (case-insensitive exact match, then
    keyword fallback, default 30). Card names that imply a scarce print
    ("Shining ...", "... ex", Gold Star, LV.X) raise the score to at least
    the override value.

psa_pop_score:
    PSA-10 population: <100 → 100, <500 → 80, <1000 → 60, <5000 → 40,
    <10000 → 20, else 10. Unknown → 50.

supply_demand_score:
    sold_30d / active: >5 → 90, >3 → 75, >1.5 → 60, >0.5 → 40, else 30.
    No active listings → 100 if anything sold, else 50. Unknown → 50.

vintage_bonus:
    Years since the set's release: ≥25 → 30, ≥20 → 25, ≥15 → 20,
    ≥10 → 15, ≥5 → 10, else 0. Unknown sets get no bonus.

Score formula
-------------
    d3 = 0.4 × rarity + 0.2 × psa_pop + 0.2 × supply_demand + 0.2 × (50 + bonus)
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from card_risk.models.card import CardMetadata
from card_risk.models.score import DimensionScore
from card_risk.scoring.stats import clamp
from card_risk.scoring.weights import weight_of
from card_risk.taxonomy.rating_taxonomy import Dimension

DEFAULT_RARITY_SCORE = 30.0
NEUTRAL_SCORE = 50.0
VINTAGE_AGE_YEARS = 20

_RARITY_SCORES: dict[str, float] = {
    "common":               5.0,
    "uncommon":            10.0,
    "rare":                25.0,
    "rare holo":           40.0,
    "rare holo v":         50.0,
    "rare holo vmax":      55.0,
    "rare holo vstar":     55.0,
    "rare ultra":          60.0,
    "rare rainbow":        70.0,
    "rare secret":         75.0,
    "rare shiny":          65.0,
    "amazing rare":        55.0,
    "radiant rare":        60.0,
    "illustration rare":   65.0,
    "special art rare":    70.0,
    "ultra rare":          68.0,
    "hyper rare":          75.0,
    "shiny rare":          65.0,
    "double rare":         55.0,
    "art rare":            70.0,
    "trainer gallery rare": 50.0,
}

# Checked in order; the first keyword group found in the label wins.
_RARITY_KEYWORDS: list[tuple[tuple[str, ...], float]] = [
    (("shining",),                 85.0),
    ((" ex",),                     80.0),
    (("secret", "hyper"),          75.0),
    (("rainbow",),                 70.0),
    (("ultra", "special art"),     68.0),
    (("illustration",),            65.0),
    (("shiny", "radiant"),         60.0),
    (("vmax", "vstar"),            55.0),
    (("holo v",),                  50.0),
    (("holo",),                    40.0),
    (("rare",),                    25.0),
    (("uncommon",),                10.0),
    (("common",),                   5.0),
]

# Exact identifiers are checked before prefixes.
_SET_YEARS_EXACT: dict[str, int] = {
    "base1": 1999,
    "base2": 1999,
    "base3": 1999,
    "base4": 2000,
    "base5": 2000,
    "base6": 2001,
    "cel25": 2021,
}

_SET_YEAR_PREFIXES: list[tuple[str, int]] = [
    ("swsh", 2020),
    ("hgss", 2010),
    ("sv",   2023),
    ("sm",   2017),
    ("xy",   2014),
    ("bw",   2011),
    ("pl",   2009),
    ("dp",   2007),
    ("ex",   2003),
    ("neo",  2000),
    ("gym",  2000),
]

_VINTAGE_PREFIXES = ("base", "neo", "gym")


def get_rarity_score(rarity: Optional[str]) -> float:
    """Rarity label → base scarcity score."""
    if not rarity:
        return DEFAULT_RARITY_SCORE

    label = rarity.strip().lower()
    if label in _RARITY_SCORES:
        return _RARITY_SCORES[label]

    # "vstar" contains "star" but is not a Gold Star print.
    if "star" in label and "vstar" not in label:
        return 90.0
    for keywords, score in _RARITY_KEYWORDS:
        if any(k in label for k in keywords):
            return score
    return DEFAULT_RARITY_SCORE


def apply_name_overrides(rarity_score: float, name: str) -> float:
    """Raise ``rarity_score`` for names that imply a scarce print."""
    lowered = name.lower()
    score = rarity_score
    if lowered.endswith(" ex") or " ex " in lowered:
        score = max(score, 85.0)
    if "gold star" in lowered or "☆" in lowered:
        score = max(score, 95.0)
    if lowered.startswith("shining "):
        score = max(score, 90.0)
    if "lv.x" in lowered:
        score = max(score, 80.0)
    return score


def get_psa_population_score(population: Optional[int]) -> float:
    if population is None:
        return NEUTRAL_SCORE
    if population < 100:
        return 100.0
    if population < 500:
        return 80.0
    if population < 1000:
        return 60.0
    if population < 5000:
        return 40.0
    if population < 10000:
        return 20.0
    return 10.0


def get_supply_demand_score(
    sold_30d: Optional[int],
    active: Optional[int],
) -> float:
    """Sold-to-active listing ratio → demand pressure score.

    The table is monotonic: anything at or below a 0.5 ratio lands on the
    low-liquidity floor of 30.
    """
    if sold_30d is None or active is None:
        return NEUTRAL_SCORE
    if active == 0:
        return 100.0 if sold_30d > 0 else NEUTRAL_SCORE

    ratio = sold_30d / active
    if ratio > 5:
        return 90.0
    if ratio > 3:
        return 75.0
    if ratio > 1.5:
        return 60.0
    if ratio > 0.5:
        return 40.0
    return 30.0


def estimate_set_year(set_identifier: str) -> Optional[int]:
    """Release year for a set identifier, or ``None`` if unrecognised."""
    set_id = set_identifier.strip().lower()
    if not set_id:
        return None
    if set_id in _SET_YEARS_EXACT:
        return _SET_YEARS_EXACT[set_id]
    for prefix, year in _SET_YEAR_PREFIXES:
        if set_id.startswith(prefix):
            return year
    return None


def get_vintage_bonus(set_year: Optional[int], as_of: date) -> float:
    if set_year is None:
        return 0.0
    age = as_of.year - set_year
    if age >= 25:
        return 30.0
    if age >= 20:
        return 25.0
    if age >= 15:
        return 20.0
    if age >= 10:
        return 15.0
    if age >= 5:
        return 10.0
    return 0.0


def is_vintage_set(set_identifier: str, as_of: date) -> bool:
    """True for WotC-era sets or any set at least 20 years old."""
    set_id = set_identifier.strip().lower()
    if set_id.startswith(_VINTAGE_PREFIXES):
        return True
    year = estimate_set_year(set_id)
    return year is not None and as_of.year - year >= VINTAGE_AGE_YEARS


def score_scarcity(metadata: CardMetadata, as_of: date) -> DimensionScore:
    """Score how scarce a card is.

    Args:
        metadata: Card snapshot (rarity, set, PSA population, listings).
        as_of: Reference date for the set age.

    Returns:
        ``DimensionScore`` for ``Dimension.SCARCITY``. An unknown PSA population
        scores neutral and marks the dimension degraded.
    """
    base_rarity = get_rarity_score(metadata.rarity)
    rarity_score = apply_name_overrides(base_rarity, metadata.name)
    pop_score = get_psa_population_score(metadata.psa_population)
    sd_score = get_supply_demand_score(metadata.sold_listings_30d, metadata.active_listings)
    set_year = estimate_set_year(metadata.set_identifier)
    bonus = get_vintage_bonus(set_year, as_of)

    total = (
        0.4 * rarity_score
        + 0.2 * pop_score
        + 0.2 * sd_score
        + 0.2 * (NEUTRAL_SCORE + bonus)
    )

    return DimensionScore(
        dimension=Dimension.SCARCITY,
        score=clamp(total, 0.0, 100.0),
        weight=weight_of(Dimension.SCARCITY),
        details={
            "rarity_score": rarity_score,
            "rarity_overridden": rarity_score != base_rarity,
            "psa_population": metadata.psa_population,
            "psa_pop_score": pop_score,
            "supply_demand_score": sd_score,
            "set_year": set_year,
            "vintage_bonus": bonus,
        },
        degraded=metadata.psa_population is None,
    )
