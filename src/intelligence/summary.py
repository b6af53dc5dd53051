"""
Read-only query layer over the anomaly, prediction and pattern stores.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from .anomaly import AnomalyDetector
from .forecast import Forecaster
from .models import (
    Anomaly,
    HealthReport,
    HealthStatus,
    IntelligenceReport,
    Pattern,
    PatternType,
    Prediction,
    Severity,
)
from .patterns import PatternDetector

RECENT_WINDOW = timedelta(hours=1)
ACCURATE_THRESHOLD = 80

# Health score penalties
CRITICAL_PENALTY = 30
FREQUENCY_PENALTY = 20
FREQUENCY_LIMIT = 5
CONFIDENCE_PENALTY = 15
CONFIDENCE_FLOOR = 0.7


class IntelligenceSummary:
    """Filtered queries and a derived health score"""

    def __init__(
        self,
        anomalies: AnomalyDetector,
        forecaster: Forecaster,
        patterns: PatternDetector,
        clock: Callable[[], datetime] | None = None,
    ):
        self.anomalies = anomalies
        self.forecaster = forecaster
        self.patterns = patterns
        self.clock = clock or (lambda: datetime.now(UTC))

    def get_anomalies(
        self,
        severity: Severity | str | None = None,
        metric: str | None = None,
        time_range_hours: float | None = None,
    ) -> list[Anomaly]:
        """Anomalies matching every given filter, newest first

        Args:
            severity: Keep only this severity; an unknown value matches nothing
            metric: Keep only this metric
            time_range_hours: Keep only anomalies detected within this many hours
        """
        anomalies = self.anomalies.history

        if severity is not None:
            try:
                wanted = Severity(severity)
            except ValueError:
                return []
            anomalies = [a for a in anomalies if a.severity is wanted]

        if metric is not None:
            anomalies = [a for a in anomalies if a.metric == metric]

        if time_range_hours:
            cutoff = self.clock() - timedelta(hours=time_range_hours)
            anomalies = [a for a in anomalies if a.timestamp >= cutoff]

        return sorted(anomalies, key=lambda a: a.timestamp, reverse=True)

    def get_prediction(self, metric: str) -> Prediction | None:
        return self.forecaster.predictions.get(metric)

    def get_all_predictions(self) -> list[Prediction]:
        return list(self.forecaster.predictions.values())

    def get_patterns(
        self, type: PatternType | str | None = None, metric: str | None = None
    ) -> list[Pattern]:
        """Patterns matching every given filter, strongest first"""
        patterns = self.patterns.patterns

        if type is not None:
            try:
                wanted = PatternType(type)
            except ValueError:
                return []
            patterns = [p for p in patterns if p.type is wanted]

        if metric is not None:
            patterns = [p for p in patterns if metric in p.metrics]

        return sorted(patterns, key=lambda p: p.strength, reverse=True)

    def get_intelligence_summary(self) -> IntelligenceReport:
        """Aggregate counts plus a 0-100 health score"""
        anomalies = self.anomalies.history
        cutoff = self.clock() - RECENT_WINDOW
        critical = [a for a in anomalies if a.severity is Severity.CRITICAL]
        recent = [a for a in anomalies if a.timestamp > cutoff]

        predictions = self.get_all_predictions()
        confidences = [p.predictions[0].confidence for p in predictions if p.predictions]
        avg_confidence = sum(confidences) / max(len(predictions), 1)

        patterns = self.patterns.patterns

        health = self._health(
            critical=len(critical),
            recent=len(recent),
            has_predictions=bool(predictions),
            avg_confidence=avg_confidence,
        )

        return IntelligenceReport(
            anomalies_total=len(anomalies),
            anomalies_critical=len(critical),
            anomalies_recent=len(recent),
            predictions_total=len(predictions),
            predictions_accurate=sum(1 for p in predictions if p.accuracy >= ACCURATE_THRESHOLD),
            predictions_avg_confidence=avg_confidence,
            patterns_total=len(patterns),
            patterns_seasonal=sum(1 for p in patterns if p.type is PatternType.SEASONAL),
            patterns_cyclical=sum(1 for p in patterns if p.type is PatternType.CYCLICAL),
            health=health,
        )

    def _health(
        self, critical: int, recent: int, has_predictions: bool, avg_confidence: float
    ) -> HealthReport:
        score = 100
        issues = []

        if critical > 0:
            score -= CRITICAL_PENALTY
            issues.append(f"{critical} critical anomalies detected")

        if recent > FREQUENCY_LIMIT:
            score -= FREQUENCY_PENALTY
            issues.append("High anomaly frequency detected")

        # No predictions yet is a fresh baseline, not low confidence
        if has_predictions and avg_confidence < CONFIDENCE_FLOOR:
            score -= CONFIDENCE_PENALTY
            issues.append("Low prediction confidence")

        score = min(100, max(0, score))
        return HealthReport(status=HealthStatus.from_score(score), score=score, issues=issues)
