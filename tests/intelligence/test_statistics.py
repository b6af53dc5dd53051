"""
Tests for numerical helpers.
"""

import math

import numpy as np
import pytest

from src.intelligence.statistics import (
    autocorrelation,
    coefficient_of_variation,
    linear_regression,
    ols_slope,
    window_statistics,
)


class TestWindowStatistics:
    """Tests for window_statistics."""

    def test_population_statistics(self):
        """Test mean and population standard deviation."""
        stats = window_statistics([2, 4, 4, 4, 5, 5, 7, 9])

        assert stats.mean == pytest.approx(5.0)
        assert stats.std_dev == pytest.approx(2.0)

    def test_trend_of_arithmetic_series(self):
        stats = window_statistics([1, 4, 7, 10, 13])

        assert stats.trend == pytest.approx(3.0)

    def test_constant_window(self):
        stats = window_statistics([45.0] * 10)

        assert stats.mean == 45.0
        assert stats.std_dev == 0.0
        assert stats.trend == pytest.approx(0.0)

    def test_nan_propagates(self):
        """Test that NaN is carried through instead of raising."""
        with np.errstate(all="ignore"):
            stats = window_statistics([1.0, float("nan"), 3.0])

        assert math.isnan(stats.mean)
        assert math.isnan(stats.std_dev)


class TestOlsSlope:
    @pytest.mark.parametrize(
        "values,expected",
        [
            ([0, 1, 2, 3], 1.0),
            ([10, 8, 6, 4, 2], -2.0),
            ([5, 5, 5], 0.0),
        ],
    )
    def test_known_slopes(self, values, expected):
        assert ols_slope(values) == pytest.approx(expected)

    def test_single_point_is_nan(self):
        """Test that a degenerate fit yields NaN rather than an exception."""
        with np.errstate(all="ignore"):
            assert math.isnan(ols_slope([3.0]))


class TestLinearRegression:
    """Tests for linear_regression."""

    def test_perfect_line(self):
        fit = linear_regression([2 * i + 1 for i in range(10)])

        assert fit.slope == pytest.approx(2.0)
        assert fit.intercept == pytest.approx(1.0)
        assert fit.r_squared == pytest.approx(1.0)
        assert fit.residual_sum_squares == pytest.approx(0.0, abs=1e-9)
        assert fit.sum_xx == pytest.approx(sum(i * i for i in range(10)))

    def test_flat_window_is_fully_explained(self):
        fit = linear_regression([7.0] * 12)

        assert fit.total_sum_squares == 0
        assert fit.r_squared == 1.0

    def test_predict(self):
        fit = linear_regression([0, 1, 2, 3])

        assert fit.predict(10) == pytest.approx(10.0)

    def test_std_error(self):
        """Test residual standard error with n - 2 degrees of freedom."""
        fit = linear_regression([0, 2, 0, 2])

        expected = math.sqrt(fit.residual_sum_squares / 2)
        assert fit.std_error == pytest.approx(expected)

    def test_noisy_series_has_low_r_squared(self):
        fit = linear_regression([0, 100] * 12)

        assert fit.r_squared < 0.1


class TestAutocorrelation:
    """Tests for autocorrelation."""

    def test_sine_at_its_period(self, sine_wave):
        """Test that a sine correlates with itself one period later."""
        values = sine_wave(period=24, points=48)

        assert autocorrelation(values, 24) == pytest.approx(1.0, abs=1e-6)

    def test_sine_at_half_period_is_negative(self, sine_wave):
        values = sine_wave(period=24, points=96)

        assert autocorrelation(values, 12) < -0.9

    def test_bounded(self, sine_wave):
        values = [v + i for i, v in enumerate(sine_wave(period=24, points=100))]

        assert -1.0 <= autocorrelation(values, 24) <= 1.0

    def test_normalised_by_both_overlap_segments(self):
        """Deviations from mean 1 are [-1, -1, -1, 3]; segments carry energy 3 and 11."""
        assert autocorrelation([0.0, 0.0, 0.0, 4.0], 1) == pytest.approx(-1 / math.sqrt(33))

    def test_series_shorter_than_lag(self):
        assert autocorrelation([1, 2, 3], 24) == 0.0

    def test_constant_series(self):
        assert autocorrelation([5.0] * 60, 24) == 0.0

    def test_non_positive_lag(self):
        assert autocorrelation([1, 2, 3, 4], 0) == 0.0


class TestCoefficientOfVariation:
    def test_known_value(self):
        assert coefficient_of_variation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(0.4)

    def test_zero_mean_is_not_an_error(self):
        with np.errstate(all="ignore"):
            result = coefficient_of_variation([-1.0, 1.0])

        assert math.isinf(result)
