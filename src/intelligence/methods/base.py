"""
Base abstract interface for forecasting methods.

All forecasting methods must inherit from ForecastMethod and implement:
- fit(): Fit the model on the lookback window
The returned FittedForecast extrapolates values and confidence margins.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

Z_95 = 1.96  # two-sided 95% normal quantile


class FittedForecast(ABC):
    """A model fitted on a window of n samples indexed 0..n-1"""

    n: int

    @property
    @abstractmethod
    def slope(self) -> float:
        """Trend slope at the end of the window"""
        pass

    @property
    @abstractmethod
    def r_squared(self) -> float:
        pass

    @abstractmethod
    def extrapolate(self, steps: int) -> tuple[float, float]:
        """Predict the value ``steps`` samples after the window

        Returns:
            (value, margin) where margin is the half-width of the 95% band
        """
        pass

    @property
    def accuracy(self) -> float:
        """R² as a percentage clamped to [0, 100]"""
        return float(np.clip(self.r_squared * 100, 0.0, 100.0))


class ForecastMethod(ABC):
    """Abstract base class for all forecasting methods"""

    @abstractmethod
    def fit(self, values: Sequence[float]) -> FittedForecast:
        """Fit the model on the lookback window

        Args:
            values: Samples, oldest first

        Returns:
            FittedForecast ready for extrapolation
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the forecasting method"""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
