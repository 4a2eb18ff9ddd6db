"""Top-level package for the Trend Predictor project."""

from .core.analysis import analyze_stocks, parse_symbols
from .core.config import Settings

__all__ = ["Settings", "analyze_stocks", "parse_symbols"]
