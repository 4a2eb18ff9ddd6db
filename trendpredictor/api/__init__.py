"""HTTP surface for Trend Predictor."""

from .app import app, create_app

__all__ = ["app", "create_app"]
