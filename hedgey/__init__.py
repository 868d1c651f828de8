"""Lending and perp position analytics: exposure, hedge effectiveness, greeks."""
from .analyzers import (
    ExposureAnalyzer,
    GreeksCalculator,
    HedgeAnalyzer,
    analyze_exposure,
    analyze_hedge,
    calculate_greeks,
)
from .symbols import SymbolNormalizer

__version__ = "0.1.0"

__all__ = [
    "ExposureAnalyzer",
    "GreeksCalculator",
    "HedgeAnalyzer",
    "SymbolNormalizer",
    "analyze_exposure",
    "analyze_hedge",
    "calculate_greeks",
]
