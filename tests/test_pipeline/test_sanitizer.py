"""
Tests for card_risk/pipeline/sanitizer.py.

What we test
------------
- Invalid prices (None, zero, negative, NaN, inf) are dropped and counted.
- Same-date duplicates keep the latest recorded_at, else the last in input.
- Output is sorted ascending with one point per date.
- Outliers are flagged, never removed, and need at least three points.
- Gaps longer than max_gap_days are filled one point per missing day.
- Mixed card feeds are rejected; sanitize_by_card() groups them.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone

import pytest

from card_risk.config import SanitizerConfig
from card_risk.models.price import RawPricePoint
from card_risk.pipeline.sanitizer import sanitize_by_card, sanitize_price_series


# ── Invalid prices ────────────────────────────────────────────────────────────

def test_invalid_prices_dropped(make_raw):
    raw = [
        make_raw(0, 100.0),
        make_raw(1, None),
        make_raw(2, 0.0),
        make_raw(3, -5.0),
        make_raw(4, math.nan),
        make_raw(5, math.inf),
        make_raw(6, 101.0),
    ]
    result = sanitize_price_series(raw, SanitizerConfig(max_gap_days=10))
    assert result.invalid_dropped == 5
    assert [p.price for p in result.points] == [100.0, 101.0]


def test_empty_input():
    result = sanitize_price_series([])
    assert result.points == []
    assert result.cleaned_series == []


# ── Deduplication ─────────────────────────────────────────────────────────────

class TestDeduplication:
    def test_latest_recorded_at_wins(self, make_raw):
        later = datetime(2024, 1, 1, 20, tzinfo=timezone.utc)
        earlier = datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
        raw = [make_raw(0, 105.0, recorded_at=later), make_raw(0, 100.0, recorded_at=earlier)]
        result = sanitize_price_series(raw)
        assert [p.price for p in result.points] == [105.0]
        assert result.duplicates_removed == 1

    def test_without_timestamps_last_in_input_wins(self, make_raw):
        result = sanitize_price_series([make_raw(0, 100.0), make_raw(0, 102.0)])
        assert [p.price for p in result.points] == [102.0]

    def test_untimestamped_does_not_replace_timestamped(self, make_raw):
        stamped = datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
        raw = [make_raw(0, 100.0, recorded_at=stamped), make_raw(0, 200.0)]
        assert [p.price for p in sanitize_price_series(raw).points] == [100.0]

    def test_naive_timestamp_treated_as_utc(self, make_raw):
        naive_later = datetime(2024, 1, 1, 21)
        aware_earlier = datetime(2024, 1, 1, 20, tzinfo=timezone.utc)
        raw = [make_raw(0, 110.0, recorded_at=naive_later), make_raw(0, 100.0, recorded_at=aware_earlier)]
        assert [p.price for p in sanitize_price_series(raw).points] == [110.0]

    def test_invalid_duplicate_does_not_shadow_valid(self, make_raw):
        raw = [make_raw(0, 100.0), make_raw(0, None)]
        result = sanitize_price_series(raw)
        assert [p.price for p in result.points] == [100.0]
        assert result.duplicates_removed == 0


def test_output_sorted_one_per_date(make_raw):
    raw = [make_raw(2, 102.0), make_raw(0, 100.0), make_raw(1, 101.0), make_raw(1, 101.5)]
    result = sanitize_price_series(raw)
    dates = [p.date for p in result.points]
    assert dates == sorted(dates)
    assert len(dates) == len(set(dates)) == 3


# ── Outliers ──────────────────────────────────────────────────────────────────

class TestOutliers:
    def test_spike_flagged_not_removed(self, make_raw):
        raw = [make_raw(i, 100.0) for i in range(20)] + [make_raw(20, 1000.0)]
        result = sanitize_price_series(raw)
        assert result.outlier_count == 1
        assert result.points[-1].is_outlier is True
        assert result.points[-1].price == 1000.0
        assert len(result.points) == 21

    def test_flat_series_has_no_outliers(self, make_raw):
        result = sanitize_price_series([make_raw(i, 50.0) for i in range(10)])
        assert result.outlier_count == 0

    def test_two_points_never_flagged(self, make_raw):
        result = sanitize_price_series([make_raw(0, 1.0), make_raw(1, 1000.0)])
        assert result.outlier_flags == [False, False]

    def test_sigma_is_configurable(self, make_raw):
        raw = [make_raw(i, 100.0 + (i % 2) * 10) for i in range(10)] + [make_raw(10, 130.0)]
        assert sanitize_price_series(raw, SanitizerConfig(outlier_sigma=3.0)).outlier_count == 0
        assert sanitize_price_series(raw, SanitizerConfig(outlier_sigma=1.0)).outlier_count >= 1


# ── Gap filling ───────────────────────────────────────────────────────────────

class TestGapFilling:
    def test_five_day_gap_interpolated(self, make_raw):
        result = sanitize_price_series([make_raw(0, 100.0), make_raw(5, 150.0)])
        assert [p.price for p in result.points] == pytest.approx([100.0, 110.0, 120.0, 130.0, 140.0, 150.0])
        assert result.interpolated_flags == [False, True, True, True, True, False]
        assert result.points[1].date == date(2024, 1, 2)

    def test_gap_at_threshold_not_filled(self, make_raw):
        result = sanitize_price_series([make_raw(0, 100.0), make_raw(2, 120.0)])
        assert result.interpolated_count == 0
        assert len(result.points) == 2

    def test_gap_over_threshold_filled(self, make_raw):
        result = sanitize_price_series([make_raw(0, 100.0), make_raw(3, 130.0)])
        assert result.interpolated_count == 2

    def test_max_gap_configurable(self, make_raw):
        raw = [make_raw(0, 100.0), make_raw(5, 150.0)]
        assert sanitize_price_series(raw, SanitizerConfig(max_gap_days=5)).interpolated_count == 0

    def test_observed_series_excludes_interpolated(self, make_raw):
        result = sanitize_price_series([make_raw(0, 100.0), make_raw(5, 150.0)])
        assert [p.price for p in result.observed_series] == [100.0, 150.0]
        assert len(result.cleaned_series) == 6


# ── Multi-card feeds ──────────────────────────────────────────────────────────

class TestMultiCard:
    def test_mixed_card_ids_rejected(self, make_raw):
        raw = [make_raw(0, 100.0, card_id="a"), make_raw(1, 100.0, card_id="b")]
        with pytest.raises(ValueError, match="sanitize_by_card"):
            sanitize_price_series(raw)

    def test_missing_card_id_is_fine_for_single_card(self, make_raw):
        raw = [make_raw(0, 100.0, card_id=None), make_raw(1, 101.0, card_id="a")]
        assert len(sanitize_price_series(raw).points) == 2

    def test_sanitize_by_card_groups(self, make_raw):
        raw = [
            make_raw(0, 100.0, card_id="a"),
            make_raw(0, 5.0, card_id="b"),
            make_raw(1, 101.0, card_id="a"),
            make_raw(1, 6.0, card_id=None),
        ]
        grouped = sanitize_by_card(raw)
        assert set(grouped) == {"a", "b"}
        assert [p.price for p in grouped["a"].points] == [100.0, 101.0]
        assert [p.price for p in grouped["b"].points] == [5.0]

    def test_sanitize_by_card_does_not_mix_dates(self):
        day = date(2024, 3, 1)
        raw = [
            RawPricePoint(card_id="a", date=day, price=10.0),
            RawPricePoint(card_id="b", date=day, price=20.0),
            RawPricePoint(card_id="a", date=day + timedelta(days=1), price=11.0),
        ]
        grouped = sanitize_by_card(raw)
        assert grouped["a"].duplicates_removed == 0
        assert grouped["b"].points[0].price == 20.0
