"""
Seasonality detection via lag autocorrelation.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from .models import Pattern, PatternConfig, PatternType, generate_id
from .statistics import autocorrelation
from .store import MetricStore

logger = structlog.get_logger(__name__)

MAX_PATTERNS = 50
SEASONAL_CORRELATION_THRESHOLD = 0.7


class PatternDetector:
    """Finds recurring patterns and keeps the most recent significant ones"""

    def __init__(
        self,
        config: PatternConfig,
        clock: Callable[[], datetime] | None = None,
        capacity: int = MAX_PATTERNS,
    ):
        self.config = config
        self.clock = clock or (lambda: datetime.now(UTC))
        self.capacity = capacity
        self._patterns: list[Pattern] = []

    @property
    def patterns(self) -> list[Pattern]:
        """Patterns, oldest first"""
        return list(self._patterns)

    def analyze(self, store: MetricStore) -> list[Pattern]:
        """Run pattern detection over every tracked metric"""
        found = []
        for metric, values in store.items():
            if len(values) < self.config.min_pattern_length:
                continue

            seasonal = self.detect_seasonal_pattern(metric, values)
            if seasonal is not None:
                found.append(seasonal)

            cyclical = self.detect_cyclical_pattern(metric, values)
            if cyclical is not None:
                found.append(cyclical)

        patterns = self._patterns + found
        patterns = [p for p in patterns if p.significance >= self.config.significance_threshold]
        self._patterns = patterns[-self.capacity :]
        return found

    def detect_seasonal_pattern(self, metric: str, values: list[float]) -> Pattern | None:
        """Match the series against each candidate lag and keep the strongest"""
        lags = sorted(self.config.seasonal_lags)
        best_lag = 0
        best_correlation = 0.0

        for lag in lags:
            if len(values) < lag * 2:
                continue
            correlation = autocorrelation(values, lag)
            if correlation > best_correlation:
                best_correlation = correlation
                best_lag = lag

        if not best_correlation > SEASONAL_CORRELATION_THRESHOLD:
            return None

        periodicity = "daily" if best_lag == lags[0] else "weekly"
        logger.info(
            "Seasonal pattern detected",
            metric=metric,
            lag=best_lag,
            periodicity=periodicity,
            correlation=round(best_correlation, 3),
        )
        return Pattern(
            id=generate_id(),
            name=f"{metric} Seasonal Pattern",
            type=PatternType.SEASONAL,
            description=f"Strong {periodicity} seasonal pattern detected",
            strength=best_correlation,
            periodicity=periodicity,
            significance=best_correlation,
            metrics=[metric],
            detected_at=self.clock(),
        )

    def detect_cyclical_pattern(self, metric: str, values: list[float]) -> Pattern | None:
        """Cyclical (non-calendar) detection is not implemented and finds nothing"""
        # TODO: spectral (FFT) search for dominant non-seasonal periods
        return None

    def clear(self) -> None:
        self._patterns = []
