"""
Tests for card_risk/scoring/scarcity.py.

What we test
------------
- Rarity lookup: exact labels, keyword fallback order, default 30.
- Name overrides only ever raise the rarity score.
- PSA population and supply/demand buckets, including unknown inputs.
- Set year estimation and the age bonus.
- The full D3 formula on a known card, and degradation when the PSA
  population is unknown.
"""

from __future__ import annotations

from datetime import date

import pytest

from card_risk.scoring.scarcity import (
    apply_name_overrides,
    estimate_set_year,
    get_psa_population_score,
    get_rarity_score,
    get_supply_demand_score,
    get_vintage_bonus,
    is_vintage_set,
    score_scarcity,
)
from card_risk.taxonomy.rating_taxonomy import Dimension

AS_OF = date(2024, 6, 1)


# ── Rarity ────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "rarity, expected",
    [
        ("Common", 5.0),
        ("Rare Holo", 40.0),
        ("rare holo vmax", 55.0),
        ("Special Art Rare", 70.0),
        ("Hyper Rare", 75.0),
        ("  Double Rare ", 55.0),
    ],
)
def test_exact_rarity_labels(rarity, expected):
    assert get_rarity_score(rarity) == expected


@pytest.mark.parametrize(
    "rarity, expected",
    [
        ("Rare Holo Star", 90.0),
        ("Rare Holo VSTAR Alt", 55.0),
        ("Rare Shining", 85.0),
        ("Rare Holo EX", 80.0),
        ("Secret Rare Gold", 75.0),
        ("Rare Holo LV.X", 40.0),
        ("Promo Uncommon", 10.0),
    ],
)
def test_keyword_fallback(rarity, expected):
    assert get_rarity_score(rarity) == expected


@pytest.mark.parametrize("rarity", [None, "", "Promo"])
def test_unknown_rarity_defaults_to_30(rarity):
    assert get_rarity_score(rarity) == 30.0


class TestNameOverrides:
    def test_ex_suffix(self):
        assert apply_name_overrides(40.0, "Charizard ex") == 85.0

    def test_gold_star(self):
        assert apply_name_overrides(40.0, "Rayquaza Gold Star") == 95.0
        assert apply_name_overrides(40.0, "Umbreon ☆") == 95.0

    def test_shining_prefix(self):
        assert apply_name_overrides(40.0, "Shining Magikarp") == 90.0

    def test_lv_x(self):
        assert apply_name_overrides(40.0, "Garchomp LV.X") == 80.0

    def test_never_lowers(self):
        assert apply_name_overrides(95.0, "Charizard ex") == 95.0

    def test_plain_name_unchanged(self):
        assert apply_name_overrides(40.0, "Exeggutor") == 40.0


# ── Population and listings ───────────────────────────────────────────────────

@pytest.mark.parametrize(
    "population, expected",
    [(None, 50.0), (0, 100.0), (99, 100.0), (100, 80.0), (499, 80.0), (500, 60.0),
     (999, 60.0), (1000, 40.0), (4999, 40.0), (5000, 20.0), (9999, 20.0), (10000, 10.0)],
)
def test_psa_population_buckets(population, expected):
    assert get_psa_population_score(population) == expected


@pytest.mark.parametrize(
    "sold, active, expected",
    [
        (None, 10, 50.0),
        (10, None, 50.0),
        (5, 0, 100.0),
        (0, 0, 50.0),
        (60, 10, 90.0),
        (40, 10, 75.0),
        (20, 10, 60.0),
        (6, 10, 40.0),
        (5, 10, 30.0),
        (0, 10, 30.0),
    ],
)
def test_supply_demand(sold, active, expected):
    assert get_supply_demand_score(sold, active) == expected


def test_supply_demand_is_monotonic_in_sales():
    scores = [get_supply_demand_score(sold, 10) for sold in range(0, 80)]
    assert scores == sorted(scores)


# ── Set age ───────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "set_id, expected",
    [("base1", 1999), ("BASE4", 2000), ("cel25", 2021), ("swsh7", 2020),
     ("sv3pt5", 2023), ("sm12", 2017), ("neo2", 2000), ("", None), ("zzz", None)],
)
def test_estimate_set_year(set_id, expected):
    assert estimate_set_year(set_id) == expected


@pytest.mark.parametrize(
    "year, expected",
    [(None, 0.0), (1999, 30.0), (2004, 25.0), (2009, 20.0), (2014, 15.0), (2019, 10.0), (2023, 0.0)],
)
def test_vintage_bonus(year, expected):
    assert get_vintage_bonus(year, AS_OF) == expected


def test_is_vintage_set():
    assert is_vintage_set("base2", AS_OF)
    assert is_vintage_set("ex5", AS_OF)
    assert not is_vintage_set("swsh7", AS_OF)
    assert not is_vintage_set("unknown", AS_OF)


# ── score_scarcity ────────────────────────────────────────────────────────────

def test_base_set_charizard(make_metadata):
    result = score_scarcity(make_metadata(), AS_OF)
    assert result.dimension == Dimension.SCARCITY
    # 0.4*40 + 0.2*80 + 0.2*40 + 0.2*(50+30)
    assert result.score == pytest.approx(56.0)
    assert result.degraded is False
    assert result.details["set_year"] == 1999
    assert result.details["vintage_bonus"] == 30.0


def test_unknown_population_is_neutral_and_degraded(make_metadata):
    result = score_scarcity(make_metadata(psa_population=None), AS_OF)
    assert result.details["psa_pop_score"] == 50.0
    assert result.degraded is True


def test_name_override_is_reported(make_metadata):
    result = score_scarcity(
        make_metadata(name="Charizard ex", rarity="Special Art Rare", set_identifier="sv3"),
        AS_OF,
    )
    assert result.details["rarity_score"] == 85.0
    assert result.details["rarity_overridden"] is True


def test_score_stays_in_range(make_metadata):
    result = score_scarcity(
        make_metadata(name="Shining Charizard Gold Star", rarity="Rare Holo Star",
                      psa_population=1, sold_listings_30d=100, active_listings=1),
        AS_OF,
    )
    assert 0.0 <= result.score <= 100.0
