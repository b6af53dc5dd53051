"""
Z-score and trend-change anomaly detection.

Workflow for each metric with enough samples:
1. Take the last ``window_size`` samples as the analysis window
2. Flag the latest sample when its z-score exceeds ``alert_threshold``
3. Compare the OLS slope of the last 20 samples with the 20 before them
   and flag sudden accelerations or decelerations
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import numpy as np
import structlog

from . import rules
from .models import AnomalyDetectionConfig, Anomaly, AnomalyType, Severity, generate_id
from .statistics import WindowStatistics, window_statistics
from .store import MetricStore

logger = structlog.get_logger(__name__)

MAX_ANOMALIES = 100
TREND_WINDOW = 20  # samples per slope window
MIN_TREND_HISTORY = 10  # older samples required for a comparison
TREND_CHANGE_THRESHOLD = 0.5


class AnomalyDetector:
    """Detects point and trend anomalies and keeps a bounded history"""

    def __init__(
        self,
        config: AnomalyDetectionConfig,
        clock: Callable[[], datetime] | None = None,
        capacity: int = MAX_ANOMALIES,
    ):
        self.config = config
        self.clock = clock or (lambda: datetime.now(UTC))
        self.capacity = capacity
        self._history: list[Anomaly] = []

    @property
    def history(self) -> list[Anomaly]:
        """Anomalies, most recent first"""
        return list(self._history)

    def analyze(self, store: MetricStore) -> list[Anomaly]:
        """Run detection over every tracked metric

        Returns:
            The anomalies found in this cycle
        """
        detected = []
        tracked = store.metric_names()

        for metric, values in store.items():
            if len(values) < self.config.min_data_points:
                continue

            point = self.detect_point_anomaly(metric, values, tracked)
            if point is not None:
                detected.append(point)

            trend = self.detect_trend_anomaly(metric, values, tracked)
            if trend is not None:
                detected.append(trend)

        for anomaly in detected:
            logger.info(
                "Anomaly detected",
                metric=anomaly.metric,
                type=anomaly.type.value,
                severity=anomaly.severity.value,
                value=anomaly.value,
                expected=anomaly.expected_value,
                deviation=round(float(anomaly.deviation), 3),
            )

        self._history = (detected + self._history)[: self.capacity]
        return detected

    def detect_point_anomaly(
        self, metric: str, values: list[float], tracked: list[str]
    ) -> Anomaly | None:
        """Flag the latest sample if it lies too far from the window mean"""
        window = values[-self.config.window_size :]
        latest = values[-1]
        stats = window_statistics(window)

        z_score = float(np.abs(np.float64(latest) - stats.mean) / np.float64(stats.std_dev))
        if not z_score > self.config.alert_threshold:
            return None

        return self._build_point_anomaly(metric, latest, z_score, stats, tracked)

    def detect_trend_anomaly(
        self, metric: str, values: list[float], tracked: list[str]
    ) -> Anomaly | None:
        """Flag a sudden change in slope between consecutive windows"""
        recent = values[-TREND_WINDOW:]
        older = values[-2 * TREND_WINDOW : -TREND_WINDOW]
        if len(older) < MIN_TREND_HISTORY:
            return None

        recent_stats = window_statistics(recent)
        older_stats = window_statistics(older)

        trend_change = recent_stats.trend - older_stats.trend
        magnitude = abs(trend_change)
        if not magnitude > TREND_CHANGE_THRESHOLD:
            return None

        direction = "accelerating" if trend_change > 0 else "decelerating"
        return Anomaly(
            id=generate_id(),
            type=AnomalyType.TREND,
            severity=Severity.from_deviation(magnitude * 2),
            metric=metric,
            value=recent[-1],
            expected_value=older_stats.mean,
            deviation=magnitude,
            timestamp=self.clock(),
            confidence=min(0.95, magnitude),
            description=f"Significant trend change detected in {metric}: {direction}",
            recommendations=rules.trend_recommendations(trend_change),
            related_metrics=rules.related_metrics(metric, tracked),
        )

    def count_recent(self, metric: str, window: timedelta = timedelta(hours=1)) -> int:
        """Number of anomalies for a metric detected within ``window`` of now"""
        cutoff = self.clock() - window
        return sum(1 for a in self._history if a.metric == metric and a.timestamp > cutoff)

    def clear(self) -> None:
        self._history = []

    def _build_point_anomaly(
        self,
        metric: str,
        value: float,
        z_score: float,
        stats: WindowStatistics,
        tracked: list[str],
    ) -> Anomaly:
        is_spike = value > stats.mean
        confidence = min(0.99, z_score / self.config.alert_threshold)

        return Anomaly(
            id=generate_id(),
            type=AnomalyType.SPIKE if is_spike else AnomalyType.DROP,
            severity=Severity.from_deviation(z_score),
            metric=metric,
            value=value,
            expected_value=stats.mean,
            deviation=z_score,
            timestamp=self.clock(),
            confidence=confidence,
            description=describe_deviation(metric, value, stats.mean, is_spike),
            recommendations=rules.recommendations_for(metric, is_spike, stats.trend),
            related_metrics=rules.related_metrics(metric, tracked),
        )


def describe_deviation(metric: str, value: float, expected: float, is_spike: bool) -> str:
    """Human readable summary, e.g. 'Spike detected in cpu: 42.0% spike from expected value'"""
    direction = "spike" if is_spike else "drop"
    percentage = float(np.abs((np.float64(value) - expected) / np.float64(expected)) * 100)
    return (
        f"{direction.capitalize()} detected in {metric}: "
        f"{percentage:.1f}% {direction} from expected value"
    )
