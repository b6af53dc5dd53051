"""
Ordinary least squares linear forecasting.

Fits y = slope * x + intercept over the lookback window (x = 0..n-1) and
extrapolates with a 95% band widened by the distance from the window:

    margin = 1.96 * stdError * sqrt(1 + 1/n + steps² / Σx²)
"""

from collections.abc import Sequence

import numpy as np

from ..statistics import RegressionFit, linear_regression
from .base import Z_95, FittedForecast, ForecastMethod


class LinearFit(FittedForecast):
    def __init__(self, regression: RegressionFit):
        self.regression = regression
        self.n = regression.n

    @property
    def slope(self) -> float:
        return self.regression.slope

    @property
    def r_squared(self) -> float:
        return self.regression.r_squared

    def extrapolate(self, steps: int) -> tuple[float, float]:
        reg = self.regression
        value = reg.predict(reg.n + steps - 1)
        leverage = np.sqrt(1 + 1 / reg.n + np.float64(steps**2) / reg.sum_xx)
        margin = float(Z_95 * reg.std_error * leverage)
        return value, margin


class LinearMethod(ForecastMethod):
    """OLS linear regression on sample index"""

    @property
    def name(self) -> str:
        return "linear"

    def fit(self, values: Sequence[float]) -> LinearFit:
        return LinearFit(linear_regression(values))
