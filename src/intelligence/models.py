"""
Data models and configuration for the performance intelligence engine.
"""

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class AnomalyType(Enum):
    """Kinds of anomalies the detector can emit"""

    SPIKE = "spike"
    DROP = "drop"
    TREND = "trend"


class Severity(Enum):
    """Anomaly severity levels"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_deviation(cls, deviation: float) -> "Severity":
        """Bucket a deviation (in standard deviations) into a severity level"""
        if deviation < 2.5:
            return cls.LOW
        elif deviation < 3.5:
            return cls.MEDIUM
        elif deviation < 4.5:
            return cls.HIGH
        else:
            return cls.CRITICAL


class TrendDirection(Enum):
    """Direction of a forecast trend"""

    IMPROVING = "improving"
    STABLE = "stable"
    DEGRADING = "degrading"

    @classmethod
    def from_slope(cls, slope: float) -> "TrendDirection":
        if slope > 0.1:
            return cls.IMPROVING
        elif slope < -0.1:
            return cls.DEGRADING
        return cls.STABLE


class PatternType(Enum):
    """Kinds of recurring patterns"""

    SEASONAL = "seasonal"
    CYCLICAL = "cyclical"


class Timeframe(Enum):
    """Forecast horizons"""

    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    ONE_DAY = "24h"
    ONE_WEEK = "7d"

    @property
    def duration(self) -> timedelta:
        return HORIZON_DURATIONS[self]


HORIZON_DURATIONS = {
    Timeframe.ONE_HOUR: timedelta(hours=1),
    Timeframe.SIX_HOURS: timedelta(hours=6),
    Timeframe.ONE_DAY: timedelta(hours=24),
    Timeframe.ONE_WEEK: timedelta(days=7),
}


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class AnomalyDetectionConfig:
    """Thresholds for point and trend anomaly detection"""

    sensitivity: float = 0.8  # advisory, not used in scoring
    min_data_points: int = 10  # samples required before analysis runs
    window_size: int = 50  # samples in the analysis window
    alert_threshold: float = 2.5  # standard deviations


@dataclass(frozen=True)
class PredictionConfig:
    """Forecasting parameters"""

    algorithm: str = "linear"  # 'linear' or 'polynomial'
    lookback_period: int = 24  # samples used for the fit
    confidence_threshold: float = 0.75
    update_frequency: int = 5  # minutes, advisory only: the engine has no timer
    # Sampling cadence assumed when mapping horizons to steps (300 = 5min)
    sample_interval_seconds: int = 300

    def steps_for(self, timeframe: Timeframe) -> int:
        """Number of samples covering a forecast horizon at the configured cadence"""
        seconds = timeframe.duration.total_seconds()
        return max(1, round(seconds / max(1, self.sample_interval_seconds)))


@dataclass(frozen=True)
class PatternConfig:
    """Seasonality detection parameters"""

    min_pattern_length: int = 20
    significance_threshold: float = 0.95
    # Candidate lags: the shorter maps to 'daily', the longer to 'weekly'
    seasonal_lags: tuple[int, ...] = (24, 168)


@dataclass(frozen=True)
class IntelligenceConfig:
    """Complete engine configuration, immutable after construction"""

    anomaly_detection: AnomalyDetectionConfig = field(default_factory=AnomalyDetectionConfig)
    prediction: PredictionConfig = field(default_factory=PredictionConfig)
    patterns: PatternConfig = field(default_factory=PatternConfig)

    @classmethod
    def from_dict(cls, overrides: Mapping[str, Any] | None = None) -> "IntelligenceConfig":
        """Merge a partial configuration over the defaults

        Sections and fields may be given in snake_case or camelCase. Each
        section is merged field by field; unknown keys are ignored.

        Args:
            overrides: e.g. {"anomalyDetection": {"minDataPoints": 5}}

        Returns:
            A new IntelligenceConfig
        """
        config = cls()
        if not overrides:
            return config

        sections = {f.name for f in fields(cls)}
        merged = {}
        for raw_section, values in overrides.items():
            section = _snake_case(raw_section)
            if section not in sections:
                logger.warning("Ignoring unknown config section", section=raw_section)
                continue

            current = getattr(config, section)
            if isinstance(values, type(current)):
                merged[section] = values
                continue

            known = {f.name for f in fields(current)}
            updates = {}
            for raw_key, value in (values or {}).items():
                key = _snake_case(raw_key)
                if key not in known:
                    logger.warning(
                        "Ignoring unknown config field", section=section, field=raw_key
                    )
                    continue
                if key == "seasonal_lags":
                    value = tuple(value)
                updates[key] = value
            merged[section] = replace(current, **updates)

        return replace(config, **merged)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def generate_id() -> str:
    """Unique identifier for anomalies and patterns"""
    return f"perf_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class Anomaly:
    """A detected anomaly. Immutable once created."""

    id: str
    type: AnomalyType
    severity: Severity
    metric: str
    value: float
    expected_value: float
    deviation: float  # standard deviations (or slope change for trends)
    timestamp: datetime
    confidence: float
    description: str
    recommendations: list[str] = field(default_factory=list)
    related_metrics: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "metric": self.metric,
            "value": self.value,
            "expectedValue": self.expected_value,
            "deviation": self.deviation,
            "timestamp": self.timestamp.isoformat(),
            "confidence": self.confidence,
            "description": self.description,
            "recommendations": list(self.recommendations),
            "relatedMetrics": list(self.related_metrics),
        }


@dataclass(frozen=True)
class PredictionPoint:
    """Forecast for a single horizon"""

    timestamp: datetime
    value: float
    confidence: float
    upper_bound: float
    lower_bound: float

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "value": self.value,
            "confidence": self.confidence,
            "upperBound": self.upper_bound,
            "lowerBound": self.lower_bound,
        }


@dataclass(frozen=True)
class Prediction:
    """Latest forecast for a metric"""

    metric: str
    timeframe: Timeframe
    predictions: list[PredictionPoint]
    trend: TrendDirection
    accuracy: float  # R² as a percentage
    risk_factors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "metric": self.metric,
            "timeframe": self.timeframe.value,
            "predictions": [point.to_dict() for point in self.predictions],
            "trend": self.trend.value,
            "accuracy": self.accuracy,
            "riskFactors": list(self.risk_factors),
        }


@dataclass(frozen=True)
class Pattern:
    """A recurring pattern found in a metric"""

    id: str
    name: str
    type: PatternType
    description: str
    strength: float
    periodicity: str | None
    significance: float
    metrics: list[str]
    detected_at: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
            "strength": self.strength,
            "periodicity": self.periodicity,
            "significance": self.significance,
            "metrics": list(self.metrics),
            "detectedAt": self.detected_at.isoformat(),
        }


# =============================================================================
# Summary
# =============================================================================


class HealthStatus(Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    @classmethod
    def from_score(cls, score: float) -> "HealthStatus":
        if score >= 80:
            return cls.HEALTHY
        elif score >= 60:
            return cls.WARNING
        return cls.CRITICAL


@dataclass(frozen=True)
class HealthReport:
    status: HealthStatus
    score: float
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class IntelligenceReport:
    """Aggregated view over anomalies, predictions and patterns"""

    anomalies_total: int
    anomalies_critical: int
    anomalies_recent: int
    predictions_total: int
    predictions_accurate: int
    predictions_avg_confidence: float
    patterns_total: int
    patterns_seasonal: int
    patterns_cyclical: int
    health: HealthReport

    def to_dict(self) -> dict:
        """Convert to the nested summary shape"""
        return {
            "anomalies": {
                "total": self.anomalies_total,
                "critical": self.anomalies_critical,
                "recentCount": self.anomalies_recent,
            },
            "predictions": {
                "total": self.predictions_total,
                "accurate": self.predictions_accurate,
                "avgConfidence": self.predictions_avg_confidence,
            },
            "patterns": {
                "total": self.patterns_total,
                "seasonal": self.patterns_seasonal,
                "cyclical": self.patterns_cyclical,
            },
            "health": {
                "status": self.health.status.value,
                "score": self.health.score,
                "issues": list(self.health.issues),
            },
        }
