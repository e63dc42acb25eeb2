"""Tests for card_risk/models/price.py."""

from __future__ import annotations

import math
from datetime import date

import pytest
from pydantic import ValidationError

from card_risk.models.price import PricePoint, RawPricePoint, SanitizedPricePoint, SanitizedSeries


class TestPricePoint:
    def test_valid(self):
        point = PricePoint(date=date(2024, 1, 1), price=10.5)
        assert point.price == 10.5

    def test_zero_allowed(self):
        assert PricePoint(date=date(2024, 1, 1), price=0.0).price == 0.0

    @pytest.mark.parametrize("price", [-1.0, math.nan, math.inf])
    def test_invalid_rejected(self, price):
        with pytest.raises(ValidationError):
            PricePoint(date=date(2024, 1, 1), price=price)

    def test_frozen(self):
        point = PricePoint(date=date(2024, 1, 1), price=1.0)
        with pytest.raises(ValidationError):
            point.price = 2.0


class TestRawPricePoint:
    @pytest.mark.parametrize(
        "price, valid",
        [(10.0, True), (None, False), (0.0, False), (-3.0, False), (math.nan, False), (math.inf, False)],
    )
    def test_is_valid(self, price, valid):
        assert RawPricePoint(date=date(2024, 1, 1), price=price).is_valid is valid


def test_sanitized_series_views():
    series = SanitizedSeries(points=[
        SanitizedPricePoint(date=date(2024, 1, 1), price=100.0),
        SanitizedPricePoint(date=date(2024, 1, 2), price=110.0, is_interpolated=True),
        SanitizedPricePoint(date=date(2024, 1, 3), price=900.0, is_outlier=True),
    ])
    assert len(series.cleaned_series) == 3
    assert [p.price for p in series.observed_series] == [100.0, 900.0]
    assert series.outlier_flags == [False, False, True]
    assert series.interpolated_count == 1
    assert series.outlier_count == 1
