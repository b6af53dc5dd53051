"""
Quadratic least squares forecasting.

Captures curvature the linear method misses. Windows containing non-finite
values, or too short to leave residual degrees of freedom, are handed to
the linear method instead.
"""

from collections.abc import Sequence

import numpy as np
import structlog

from .base import Z_95, FittedForecast, ForecastMethod
from .linear import LinearMethod

logger = structlog.get_logger(__name__)

DEGREE = 2
MIN_POINTS = DEGREE + 2


class PolynomialFit(FittedForecast):
    def __init__(self, coefficients: np.ndarray, values: np.ndarray):
        self.coefficients = coefficients
        self.n = len(values)

        x = np.arange(self.n, dtype=float)
        fitted = np.polyval(coefficients, x)
        self.sum_xx = float((x * x).sum())
        self.residual_sum_squares = float(((values - fitted) ** 2).sum())
        self.total_sum_squares = float(((values - values.mean()) ** 2).sum())

    @property
    def slope(self) -> float:
        """Derivative of the fitted curve at the last sample"""
        derivative = np.polyder(self.coefficients)
        return float(np.polyval(derivative, self.n - 1))

    @property
    def r_squared(self) -> float:
        if self.total_sum_squares == 0:
            return 1.0
        return 1 - self.residual_sum_squares / self.total_sum_squares

    def extrapolate(self, steps: int) -> tuple[float, float]:
        value = float(np.polyval(self.coefficients, self.n + steps - 1))
        std_error = np.sqrt(np.float64(self.residual_sum_squares) / (self.n - DEGREE - 1))
        leverage = np.sqrt(1 + 1 / self.n + np.float64(steps**2) / self.sum_xx)
        return value, float(Z_95 * std_error * leverage)


class PolynomialMethod(ForecastMethod):
    """Degree-2 polynomial regression on sample index"""

    def __init__(self):
        self._fallback = LinearMethod()

    @property
    def name(self) -> str:
        return "polynomial"

    def fit(self, values: Sequence[float]) -> FittedForecast:
        y = np.asarray(values, dtype=float)
        if len(y) < MIN_POINTS or not np.isfinite(y).all():
            logger.debug("Polynomial fit not possible, using linear", n_points=len(y))
            return self._fallback.fit(y)

        x = np.arange(len(y), dtype=float)
        coefficients = np.polyfit(x, y, DEGREE)
        return PolynomialFit(coefficients, y)
