"""
Tests for Forecaster and the forecasting methods.
"""

import math
from unittest.mock import MagicMock

import numpy as np
import pytest

from src.intelligence.forecast import HORIZONS, Forecaster
from src.intelligence.methods import (
    LinearFit,
    LinearMethod,
    PolynomialFit,
    PolynomialMethod,
    get_method,
    list_methods,
)
from src.intelligence.models import PredictionConfig, Timeframe, TrendDirection
from src.intelligence.store import MetricStore


@pytest.fixture
def anomalies():
    """Stand-in for the anomaly detector with no recent anomalies."""
    detector = MagicMock()
    detector.count_recent.return_value = 0
    return detector


@pytest.fixture
def forecaster(anomalies, clock):
    return Forecaster(PredictionConfig(), anomalies, clock=clock)


class TestMethodRegistry:
    def test_list_methods(self):
        assert list_methods() == ["linear", "polynomial"]

    def test_get_method(self):
        assert isinstance(get_method("linear"), LinearMethod)
        assert isinstance(get_method("polynomial"), PolynomialMethod)

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown method 'arima'"):
            get_method("arima")


class TestLinearMethod:
    """Tests for the OLS method."""

    def test_extrapolation(self):
        fit = LinearMethod().fit([float(i) for i in range(24)])

        value, margin = fit.extrapolate(12)

        assert value == pytest.approx(35.0)
        assert margin == pytest.approx(0.0, abs=1e-6)
        assert fit.accuracy == pytest.approx(100.0)

    def test_margin_grows_with_distance(self):
        values = [10.0 + (3.0 if i % 2 else -3.0) + 0.5 * i for i in range(24)]
        fit = LinearMethod().fit(values)

        margins = [fit.extrapolate(steps)[1] for steps in (12, 72, 288, 2016)]

        assert margins == sorted(margins)
        assert margins[0] > 0

    def test_margin_formula(self):
        values = [0.0, 2.0, 1.0, 3.0, 2.0, 4.0]
        fit = LinearMethod().fit(values)
        reg = fit.regression

        _, margin = fit.extrapolate(12)

        expected = 1.96 * reg.std_error * math.sqrt(1 + 1 / 6 + 144 / reg.sum_xx)
        assert margin == pytest.approx(expected)

    def test_accuracy_is_clamped(self):
        fit = LinearMethod().fit([0.0, 100.0] * 12)

        assert 0.0 <= fit.accuracy <= 100.0


class TestPolynomialMethod:
    """Tests for the quadratic method."""

    def test_fits_quadratic(self):
        fit = PolynomialMethod().fit([float(i * i) for i in range(24)])

        value, _ = fit.extrapolate(12)

        assert isinstance(fit, PolynomialFit)
        assert value == pytest.approx(35.0**2, rel=1e-6)
        assert fit.slope == pytest.approx(46.0, rel=1e-6)
        assert fit.accuracy == pytest.approx(100.0)

    def test_falls_back_on_non_finite(self):
        values = [1.0] * 23 + [float("nan")]

        with np.errstate(all="ignore"):
            fit = PolynomialMethod().fit(values)

        assert isinstance(fit, LinearFit)

    def test_falls_back_on_short_window(self):
        assert isinstance(PolynomialMethod().fit([1.0, 2.0, 3.0]), LinearFit)


class TestForecaster:
    """Tests for Forecaster.predict and analyze."""

    def test_four_horizons(self, forecaster, clock):
        prediction = forecaster.predict("cpu", [float(i) for i in range(30)])

        assert prediction.timeframe is Timeframe.ONE_DAY
        assert len(prediction.predictions) == len(HORIZONS) == 4
        assert [p.timestamp for p in prediction.predictions] == [
            clock() + t.duration for t in HORIZONS
        ]

    def test_uses_lookback_window(self, forecaster):
        """Test that only the last lookback_period samples are fitted."""
        values = [1000.0] * 50 + [float(i) for i in range(24)]

        prediction = forecaster.predict("cpu", values)

        assert prediction.predictions[0].value == pytest.approx(35.0)

    def test_cadence_changes_projection(self, anomalies, clock):
        config = PredictionConfig(sample_interval_seconds=60)
        forecaster = Forecaster(config, anomalies, clock=clock)

        prediction = forecaster.predict("cpu", [float(i) for i in range(24)])

        # 1h at one-minute cadence is 60 steps: x = 24 + 60 - 1
        assert prediction.predictions[0].value == pytest.approx(83.0)

    def test_increasing_series_is_improving(self, forecaster):
        prediction = forecaster.predict("cpu", [10.0 + 0.5 * i for i in range(24)])

        assert prediction.trend is TrendDirection.IMPROVING

    def test_decreasing_series_is_degrading(self, forecaster):
        prediction = forecaster.predict("cpu", [500.0 - 2.0 * i for i in range(24)])

        assert prediction.trend is TrendDirection.DEGRADING

    def test_flat_series_is_stable_and_accurate(self, forecaster):
        prediction = forecaster.predict("cpu", [42.0] * 24)

        assert prediction.trend is TrendDirection.STABLE
        assert prediction.accuracy == 100.0
        point = prediction.predictions[0]
        assert point.value == pytest.approx(42.0)
        assert point.confidence == 1.0
        assert point.upper_bound == pytest.approx(42.0)
        assert point.lower_bound == pytest.approx(42.0)

    def test_noisy_series_has_floor_confidence(self, forecaster):
        prediction = forecaster.predict("cpu", [0.0, 100.0] * 12)

        assert all(p.confidence == 0.5 for p in prediction.predictions)

    @pytest.mark.parametrize(
        "values",
        [
            [-5.0 * i for i in range(24)],
            [-100.0] * 24,
            [float((-1) ** i * i) for i in range(24)],
        ],
    )
    def test_predictions_are_non_negative(self, forecaster, values):
        prediction = forecaster.predict("cpu", values)

        for point in prediction.predictions:
            assert point.value >= 0
            assert point.upper_bound >= 0
            assert point.lower_bound >= 0

    def test_bounds_enclose_value(self, forecaster):
        values = [50.0 + (5.0 if i % 3 else -5.0) + i for i in range(24)]

        prediction = forecaster.predict("cpu", values)

        for point in prediction.predictions:
            assert point.lower_bound <= point.value <= point.upper_bound

    def test_volatility_risk(self, forecaster):
        prediction = forecaster.predict("cpu", [1.0, 100.0] * 12)

        assert "High metric volatility" in prediction.risk_factors

    def test_declining_performance_risk(self, forecaster):
        prediction = forecaster.predict("performance_score", [1000.0 - 5 * i for i in range(24)])

        assert "Declining performance trend" in prediction.risk_factors

    def test_recent_anomaly_risk(self, anomalies, clock):
        anomalies.count_recent.return_value = 3
        forecaster = Forecaster(PredictionConfig(), anomalies, clock=clock)

        prediction = forecaster.predict("cpu", [10.0] * 24)

        anomalies.count_recent.assert_called_once_with("cpu")
        assert prediction.risk_factors == ["Recent anomaly frequency"]

    def test_analyze_replaces_predictions(self, forecaster, clock):
        store = MetricStore()
        for i in range(30):
            store.append({"cpu": float(i)}, clock())

        forecaster.analyze(store)
        first = forecaster.predictions["cpu"]
        store.append({"cpu": 100.0}, clock())
        forecaster.analyze(store)

        assert list(forecaster.predictions) == ["cpu"]
        assert forecaster.predictions["cpu"] is not first

    def test_analyze_skips_short_series(self, forecaster, clock):
        store = MetricStore()
        for i in range(23):
            store.append({"cpu": float(i)}, clock())

        assert forecaster.analyze(store) == []
        assert forecaster.predictions == {}

    def test_unknown_algorithm_falls_back_to_linear(self, anomalies, clock):
        forecaster = Forecaster(PredictionConfig(algorithm="neural"), anomalies, clock=clock)

        assert forecaster.method.name == "linear"

    def test_polynomial_algorithm(self, anomalies, clock):
        forecaster = Forecaster(PredictionConfig(algorithm="polynomial"), anomalies, clock=clock)

        prediction = forecaster.predict("cpu", [float(i * i) for i in range(24)])

        assert forecaster.method.name == "polynomial"
        assert prediction.trend is TrendDirection.IMPROVING
        assert prediction.predictions[0].value == pytest.approx(1225.0, rel=1e-6)

    def test_clear(self, forecaster, clock):
        store = MetricStore()
        for _ in range(24):
            store.append({"cpu": 1.0}, clock())
        forecaster.analyze(store)

        forecaster.clear()

        assert forecaster.predictions == {}
