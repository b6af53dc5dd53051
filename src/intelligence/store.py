"""
Bounded in-memory sample buffers.
"""

from collections import deque
from collections.abc import Mapping
from datetime import UTC, datetime

import structlog

logger = structlog.get_logger(__name__)

MAX_SAMPLES = 1000


def parse_timestamp(value: str | datetime | None, default: datetime) -> datetime:
    """Parse an RFC3339 string or pass a datetime through

    RFC3339 allows lowercase separators ('t', 'z'), which fromisoformat rejects,
    so strings are upper-cased first.
    """
    if value is None:
        return default
    if isinstance(value, datetime):
        timestamp = value
    else:
        timestamp = datetime.fromisoformat(value.upper().replace("Z", "+00:00"))
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp


class MetricStore:
    """Per-metric FIFO sample buffers plus a shared timestamp axis

    Every buffer holds at most ``capacity`` entries; appending past the cap
    evicts the oldest sample. Series are created on first sample, so a metric
    that starts late has fewer entries than the axis.
    """

    def __init__(self, capacity: int = MAX_SAMPLES):
        self.capacity = capacity
        self._series: dict[str, deque[float]] = {}
        self._timestamps: deque[datetime] = deque(maxlen=capacity)

    def append(self, samples: Mapping[str, float], timestamp: datetime) -> None:
        """Record one batch of samples taken at ``timestamp``"""
        self._timestamps.append(timestamp)
        for name, value in samples.items():
            series = self._series.get(name)
            if series is None:
                series = deque(maxlen=self.capacity)
                self._series[name] = series
                logger.debug("Tracking new metric", metric=name)
            series.append(value)

    def series(self, name: str) -> list[float]:
        """Samples for a metric, oldest first (empty if unknown)"""
        return list(self._series.get(name, ()))

    def items(self):
        """Iterate (name, samples) pairs in first-seen order"""
        for name, series in self._series.items():
            yield name, list(series)

    def metric_names(self) -> list[str]:
        return list(self._series.keys())

    def timestamps(self) -> list[datetime]:
        return list(self._timestamps)

    def clear(self) -> None:
        self._series.clear()
        self._timestamps.clear()

    def __len__(self) -> int:
        """Length of the shared timestamp axis"""
        return len(self._timestamps)

    def __contains__(self, name: object) -> bool:
        return name in self._series
