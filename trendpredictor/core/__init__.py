"""Core orchestration logic for Trend Predictor."""

from .analysis import RunResult, StockAnalyzer, analyze_stocks, extract_analysis, parse_symbols
from .config import Settings
from .errors import AnalysisParseError, ConfigurationError

__all__ = [
    "AnalysisParseError",
    "ConfigurationError",
    "RunResult",
    "Settings",
    "StockAnalyzer",
    "analyze_stocks",
    "extract_analysis",
    "parse_symbols",
]
