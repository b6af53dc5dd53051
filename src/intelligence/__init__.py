"""
Performance Intelligence Engine

Bounded, in-memory analytics over named scalar telemetry samples.

Architecture:
- MetricStore: FIFO sample buffers (1000 per metric) and a shared timestamp axis
- AnomalyDetector: z-score spikes/drops and slope-change trend anomalies
- Forecaster: pluggable regression methods projecting 1h/6h/24h/7d horizons
- PatternDetector: seasonality via lag autocorrelation
- IntelligenceSummary: filtered queries and a derived health score

Usage:
    engine = PerformanceIntelligence({"prediction": {"sampleIntervalSeconds": 60}})
    engine.add_metrics({"api_latency": 45.0})
    engine.get_intelligence_summary().to_dict()

    # Replay a CSV of samples
    python -m src.intelligence.replay samples.csv
"""

from .engine import PerformanceIntelligence, create_performance_intelligence
from .models import (
    Anomaly,
    AnomalyDetectionConfig,
    AnomalyType,
    IntelligenceConfig,
    IntelligenceReport,
    Pattern,
    PatternConfig,
    PatternType,
    Prediction,
    PredictionConfig,
    PredictionPoint,
    Severity,
    Timeframe,
    TrendDirection,
)

__all__ = [
    "PerformanceIntelligence",
    "create_performance_intelligence",
    "Anomaly",
    "AnomalyDetectionConfig",
    "AnomalyType",
    "IntelligenceConfig",
    "IntelligenceReport",
    "Pattern",
    "PatternConfig",
    "PatternType",
    "Prediction",
    "PredictionConfig",
    "PredictionPoint",
    "Severity",
    "Timeframe",
    "TrendDirection",
]
