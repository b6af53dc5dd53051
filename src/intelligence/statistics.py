"""
Numerical helpers shared by the detectors and forecasters.

All functions accept any sequence of floats and never raise on NaN or
Infinity: non-finite inputs propagate into the results following numpy
semantics. Callers wrap analysis in ``np.errstate`` to silence the
floating-point warnings.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class WindowStatistics:
    """Population statistics and OLS slope of a window"""

    mean: float
    std_dev: float
    trend: float


@dataclass(frozen=True)
class RegressionFit:
    """Ordinary least squares fit of index-vs-value pairs"""

    slope: float
    intercept: float
    n: int
    sum_xx: float  # Σx² over x = 0..n-1
    residual_sum_squares: float
    total_sum_squares: float

    @property
    def r_squared(self) -> float:
        if self.total_sum_squares == 0:
            # A flat window is fully explained by a flat line
            return 1.0
        return float(1 - self.residual_sum_squares / self.total_sum_squares)

    @property
    def std_error(self) -> float:
        """Standard error of the residuals"""
        return float(np.sqrt(np.float64(self.residual_sum_squares) / (self.n - 2)))

    def predict(self, x: float) -> float:
        return float(self.slope * x + self.intercept)


def ols_slope(values: Sequence[float]) -> float:
    """Slope of the least squares line through (i, values[i])"""
    y = np.asarray(values, dtype=float)
    n = len(y)
    x = np.arange(n, dtype=float)
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()
    return float(np.float64(n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x))


def window_statistics(values: Sequence[float]) -> WindowStatistics:
    """Compute mean, population standard deviation and trend of a window"""
    y = np.asarray(values, dtype=float)
    mean = y.mean()
    std_dev = np.sqrt(((y - mean) ** 2).mean())
    return WindowStatistics(mean=float(mean), std_dev=float(std_dev), trend=ols_slope(y))


def linear_regression(values: Sequence[float]) -> RegressionFit:
    """Fit y = slope * x + intercept with x = 0..n-1"""
    y = np.asarray(values, dtype=float)
    n = len(y)
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xx = (x * x).sum()

    slope = ols_slope(y)
    intercept = (sum_y - slope * sum_x) / n

    fitted = slope * x + intercept
    y_mean = sum_y / n
    total_ss = ((y - y_mean) ** 2).sum()
    residual_ss = ((y - fitted) ** 2).sum()

    return RegressionFit(
        slope=slope,
        intercept=float(intercept),
        n=n,
        sum_xx=float(sum_xx),
        residual_sum_squares=float(residual_ss),
        total_sum_squares=float(total_ss),
    )


def autocorrelation(values: Sequence[float], lag: int) -> float:
    """Lag autocorrelation around the series mean, normalised over the overlap

    The denominator is sqrt(sum(head**2) * sum(tail**2)) over the two overlapping
    segments rather than the overlap or full-series variance. It matches those
    on stationary periodic input and keeps the result within [-1, 1].

    Returns 0 when the series is shorter than the lag or has no variance
    over the overlapping segments.
    """
    y = np.asarray(values, dtype=float)
    if lag <= 0 or len(y) <= lag:
        return 0.0

    deviations = y - y.mean()
    head = deviations[:-lag]
    tail = deviations[lag:]

    denominator = np.sqrt((head * head).sum() * (tail * tail).sum())
    if denominator == 0:
        return 0.0
    return float((head * tail).sum() / denominator)


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation divided by the mean"""
    stats = window_statistics(values)
    return float(np.float64(stats.std_dev) / stats.mean)
