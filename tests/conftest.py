"""
Pytest configuration and shared fixtures.
"""

import math
from datetime import UTC, datetime, timedelta

import pytest

from src.intelligence.engine import PerformanceIntelligence
from src.intelligence.models import (
    AnomalyDetectionConfig,
    IntelligenceConfig,
    PatternConfig,
    PredictionConfig,
)


class FakeClock:
    """Controllable replacement for datetime.now(UTC)"""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 10, 2, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock frozen at 2025-10-02T12:00:00Z."""
    return FakeClock()


@pytest.fixture
def default_config():
    """Engine configuration with documented defaults."""
    return IntelligenceConfig()


@pytest.fixture
def fast_config():
    """Small thresholds for fast tests."""
    return IntelligenceConfig(
        anomaly_detection=AnomalyDetectionConfig(
            sensitivity=0.8, min_data_points=5, window_size=20, alert_threshold=2.0
        ),
        prediction=PredictionConfig(
            algorithm="linear", lookback_period=10, confidence_threshold=0.7, update_frequency=1
        ),
        patterns=PatternConfig(min_pattern_length=10, significance_threshold=0.8),
    )


@pytest.fixture
def engine(clock):
    """Engine with default configuration and a frozen clock."""
    return PerformanceIntelligence(clock=clock)


@pytest.fixture
def fast_engine(fast_config, clock):
    """Engine with small thresholds and a frozen clock."""
    return PerformanceIntelligence(fast_config, clock=clock)


@pytest.fixture
def sine_wave():
    """Factory for a sine series: sine_wave(period, points)."""

    def _make(period: int, points: int, base: float = 100.0, amplitude: float = 10.0):
        return [base + amplitude * math.sin(2 * math.pi * i / period) for i in range(points)]

    return _make
