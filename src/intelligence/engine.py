"""
Performance intelligence engine facade.

Owns the metric store and the three analysis stages. Ingestion runs the
stages synchronously (anomalies, then forecasts, then patterns) once the
timestamp axis holds ``min_data_points`` entries; there is no background
timer. One re-entrant lock guards the whole instance so it can be shared
between threads.
"""

import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import numpy as np
import structlog

from .anomaly import AnomalyDetector
from .forecast import Forecaster
from .models import (
    Anomaly,
    IntelligenceConfig,
    IntelligenceReport,
    Pattern,
    PatternType,
    Prediction,
    Severity,
)
from .patterns import PatternDetector
from .store import MAX_SAMPLES, MetricStore, parse_timestamp
from .summary import IntelligenceSummary

logger = structlog.get_logger(__name__)


class PerformanceIntelligence:
    """In-memory anomaly detection, forecasting and pattern detection"""

    def __init__(
        self,
        config: IntelligenceConfig | Mapping[str, Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        if not isinstance(config, IntelligenceConfig):
            config = IntelligenceConfig.from_dict(config)
        self.config = config
        self.clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.RLock()

        self.store = MetricStore(capacity=MAX_SAMPLES)
        self.anomaly_detector = AnomalyDetector(config.anomaly_detection, clock=self.clock)
        self.forecaster = Forecaster(config.prediction, self.anomaly_detector, clock=self.clock)
        self.pattern_detector = PatternDetector(config.patterns, clock=self.clock)
        self.summary = IntelligenceSummary(
            self.anomaly_detector, self.forecaster, self.pattern_detector, clock=self.clock
        )

        logger.info(
            "Performance intelligence initialized",
            min_data_points=config.anomaly_detection.min_data_points,
            window_size=config.anomaly_detection.window_size,
            alert_threshold=config.anomaly_detection.alert_threshold,
            algorithm=self.forecaster.method.name,
            lookback_period=config.prediction.lookback_period,
            sample_interval_seconds=config.prediction.sample_interval_seconds,
        )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add_metrics(
        self, samples: Mapping[str, float], timestamp: str | datetime | None = None
    ) -> None:
        """Record a batch of samples and run analysis once enough data exists

        Args:
            samples: Metric name to value; NaN and Infinity are stored as-is
            timestamp: RFC3339 string or datetime, defaults to now
        """
        if not samples:
            return

        with self._lock:
            ts = parse_timestamp(timestamp, default=self.clock())
            self.store.append(samples, ts)

            if len(self.store) >= self.config.anomaly_detection.min_data_points:
                self._analyze()

    def _analyze(self) -> None:
        # Non-finite samples propagate into the statistics as NaN/Infinity
        with np.errstate(all="ignore"):
            anomalies = self.anomaly_detector.analyze(self.store)
            predictions = self.forecaster.analyze(self.store)
            patterns = self.pattern_detector.analyze(self.store)

        logger.debug(
            "Analysis cycle complete",
            samples=len(self.store),
            metrics=len(self.store.metric_names()),
            anomalies=len(anomalies),
            predictions=len(predictions),
            patterns=len(patterns),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_anomalies(
        self,
        severity: Severity | str | None = None,
        metric: str | None = None,
        time_range_hours: float | None = None,
    ) -> list[Anomaly]:
        with self._lock:
            return self.summary.get_anomalies(
                severity=severity, metric=metric, time_range_hours=time_range_hours
            )

    def get_prediction(self, metric: str) -> Prediction | None:
        with self._lock:
            return self.summary.get_prediction(metric)

    def get_all_predictions(self) -> list[Prediction]:
        with self._lock:
            return self.summary.get_all_predictions()

    def get_patterns(
        self, type: PatternType | str | None = None, metric: str | None = None
    ) -> list[Pattern]:
        with self._lock:
            return self.summary.get_patterns(type=type, metric=metric)

    def get_intelligence_summary(self) -> IntelligenceReport:
        with self._lock:
            return self.summary.get_intelligence_summary()

    def clear_data(self) -> None:
        """Reset every store to empty"""
        with self._lock:
            self.store.clear()
            self.anomaly_detector.clear()
            self.forecaster.clear()
            self.pattern_detector.clear()
        logger.info("Performance intelligence data cleared")


def create_performance_intelligence(
    config: IntelligenceConfig | Mapping[str, Any] | None = None,
) -> PerformanceIntelligence:
    """Create an engine instance; the caller owns its lifetime"""
    return PerformanceIntelligence(config)
