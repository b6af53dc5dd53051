"""
Horizon-based forecasting per metric.

The horizons (1h, 6h, 24h, 7d) are converted to sample counts through the
configured sampling cadence, so the upstream collaborator must sample at a
consistent interval matching ``PredictionConfig.sample_interval_seconds``.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import numpy as np
import structlog

from . import rules
from .anomaly import AnomalyDetector
from .methods import ForecastMethod, get_method
from .models import Prediction, PredictionConfig, PredictionPoint, Timeframe, TrendDirection
from .statistics import coefficient_of_variation
from .store import MetricStore

logger = structlog.get_logger(__name__)

HORIZONS = (Timeframe.ONE_HOUR, Timeframe.SIX_HOURS, Timeframe.ONE_DAY, Timeframe.ONE_WEEK)
PRIMARY_TIMEFRAME = Timeframe.ONE_DAY
MIN_CONFIDENCE = 0.5


class Forecaster:
    """Maintains one live Prediction per metric"""

    def __init__(
        self,
        config: PredictionConfig,
        anomalies: AnomalyDetector,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.anomalies = anomalies
        self.clock = clock or (lambda: datetime.now(UTC))
        self.method = self._resolve_method(config.algorithm)
        self._predictions: dict[str, Prediction] = {}

        logger.debug(
            "Forecaster initialized",
            method=self.method.name,
            lookback_period=config.lookback_period,
            sample_interval_seconds=config.sample_interval_seconds,
        )

    @property
    def predictions(self) -> dict[str, Prediction]:
        return dict(self._predictions)

    def analyze(self, store: MetricStore) -> list[Prediction]:
        """Refresh predictions for every metric with a full lookback window"""
        updated = []
        for metric, values in store.items():
            if len(values) < self.config.lookback_period:
                continue
            prediction = self.predict(metric, values)
            self._predictions[metric] = prediction
            updated.append(prediction)
        return updated

    def predict(self, metric: str, values: list[float]) -> Prediction:
        """Forecast a metric from its full series"""
        lookback = min(len(values), self.config.lookback_period)
        fit = self.method.fit(values[-lookback:])

        accuracy = fit.accuracy
        confidence = float(np.maximum(MIN_CONFIDENCE, accuracy / 100))
        now = self.clock()

        points = []
        for timeframe in HORIZONS:
            steps = self.config.steps_for(timeframe)
            value, margin = fit.extrapolate(steps)
            points.append(
                PredictionPoint(
                    timestamp=now + timeframe.duration,
                    value=_non_negative(value),
                    confidence=confidence,
                    upper_bound=_non_negative(value + margin),
                    lower_bound=_non_negative(value - margin),
                )
            )

        risk_factors = rules.risk_factors_for(
            metric,
            volatility=coefficient_of_variation(values),
            slope=fit.slope,
            recent_anomalies=self.anomalies.count_recent(metric),
        )

        return Prediction(
            metric=metric,
            timeframe=PRIMARY_TIMEFRAME,
            predictions=points,
            trend=TrendDirection.from_slope(fit.slope),
            accuracy=accuracy,
            risk_factors=risk_factors,
        )

    def clear(self) -> None:
        self._predictions.clear()

    def _resolve_method(self, algorithm: str) -> ForecastMethod:
        try:
            return get_method(algorithm)
        except ValueError:
            logger.warning("Unsupported forecast algorithm, using linear", algorithm=algorithm)
            return get_method("linear")


def _non_negative(value: float) -> float:
    """Floor at zero; NaN passes through unchanged"""
    return float(np.maximum(0.0, value))
