"""
Forecasting methods registry and factory.
"""

from .base import FittedForecast, ForecastMethod
from .linear import LinearFit, LinearMethod
from .polynomial import PolynomialFit, PolynomialMethod

# Registry of available methods
METHOD_REGISTRY = {
    "linear": LinearMethod,
    "polynomial": PolynomialMethod,
    # Future methods:
    # "arima": ArimaMethod,
}


def get_method(method_name: str) -> ForecastMethod:
    """Factory to create a forecasting method

    Args:
        method_name: Name of the method (e.g., 'linear')

    Returns:
        Instance of the forecasting method

    Raises:
        ValueError: If method_name is not registered
    """
    if method_name not in METHOD_REGISTRY:
        available = ", ".join(METHOD_REGISTRY.keys())
        raise ValueError(f"Unknown method '{method_name}'. Available methods: {available}")

    method_class = METHOD_REGISTRY[method_name]
    return method_class()


def list_methods() -> list[str]:
    """List all available forecasting methods"""
    return list(METHOD_REGISTRY.keys())


__all__ = [
    "FittedForecast",
    "ForecastMethod",
    "LinearFit",
    "LinearMethod",
    "PolynomialFit",
    "PolynomialMethod",
    "get_method",
    "list_methods",
]
