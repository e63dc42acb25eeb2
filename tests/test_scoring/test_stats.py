"""Tests for card_risk/scoring/stats.py."""

from __future__ import annotations

import math

import pytest

from card_risk.scoring.stats import (
    clamp,
    coefficient_of_variation,
    daily_returns,
    mean,
    pearson_correlation,
    peak_to_trough,
    population_std,
    positive_prices,
)


def test_mean_of_empty_is_zero():
    assert mean([]) == 0.0


def test_population_std_known_value():
    assert population_std([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


def test_population_std_single_value_is_zero():
    assert population_std([42.0]) == 0.0


def test_cv_known_value():
    assert coefficient_of_variation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(40.0)


def test_cv_degenerate_inputs_return_zero():
    assert coefficient_of_variation([]) == 0.0
    assert coefficient_of_variation([10.0]) == 0.0
    assert coefficient_of_variation([0.0, 0.0]) == 0.0


def test_peak_to_trough():
    assert peak_to_trough([100.0, 150.0, 120.0]) == pytest.approx(50.0)


def test_peak_to_trough_zero_minimum_returns_zero():
    assert peak_to_trough([0.0, 5.0]) == 0.0
    assert peak_to_trough([5.0]) == 0.0


def test_daily_returns():
    assert daily_returns([100.0, 110.0, 99.0]) == pytest.approx([0.1, -0.1])


def test_daily_returns_skip_non_positive_previous():
    assert daily_returns([0.0, 10.0, 20.0]) == pytest.approx([1.0])


def test_pearson_perfect_positive_and_negative():
    assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
    assert pearson_correlation([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)


@pytest.mark.parametrize(
    "xs, ys",
    [
        ([1, 2, 3], [1, 2]),         # length mismatch
        ([1, 2], [1, 2]),            # too short
        ([5, 5, 5], [1, 2, 3]),      # zero variance
    ],
)
def test_pearson_undefined_returns_zero(xs, ys):
    assert pearson_correlation(xs, ys) == 0.0


def test_positive_prices_filters_bad_values():
    assert positive_prices([1.0, None, 0.0, -3.0, math.nan, math.inf, 2.5]) == [1.0, 2.5]


def test_clamp():
    assert clamp(120.0, 0.0, 100.0) == 100.0
    assert clamp(-5.0, 0.0, 100.0) == 0.0
    assert clamp(50.0, 0.0, 100.0) == 50.0
