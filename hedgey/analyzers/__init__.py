"""Analytics core: pure, stateless calculators."""
from .exposure import ExposureAnalyzer, analyze_exposure
from .greeks import GreeksCalculator, calculate_greeks
from .hedge import HedgeAnalyzer, analyze_hedge

__all__ = [
    "ExposureAnalyzer",
    "GreeksCalculator",
    "HedgeAnalyzer",
    "analyze_exposure",
    "analyze_hedge",
    "calculate_greeks",
]
