"""Command-line interface for Trend Predictor."""

from .main import main

__all__ = ["main"]
