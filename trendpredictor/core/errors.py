"""Exception types raised by the Trend Predictor pipeline."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a required credential or setting is missing."""


class AnalysisParseError(ValueError):
    """Raised in strict mode when a fenced JSON block cannot be decoded."""

    def __init__(self, symbol: str, detail: str) -> None:
        super().__init__(f"Malformed analysis JSON for {symbol or '?'}: {detail}")
        self.symbol = symbol
        self.detail = detail


__all__ = ["AnalysisParseError", "ConfigurationError"]
