"""Keys of the analysis record and the labels used when rendering it."""

from __future__ import annotations

ANALYSIS_FIELDS = (
    ("STOCK NAME", "Stock Name"),
    ("ENTRY PRICE", "Entry Price"),
    ("TARGET PRICE", "Target Price"),
    ("STOP LOSS", "Stop Loss"),
    ("TIME HORIZON", "Time Horizon"),
    ("CONFIDENCE LEVEL", "Confidence Level"),
    ("SETUP TYPE", "Setup Type"),
    ("REASONING", "Reasoning"),
    ("LATEST NEWS", "Latest News"),
)

ANALYSIS_KEYS = tuple(key for key, _ in ANALYSIS_FIELDS)

__all__ = ["ANALYSIS_FIELDS", "ANALYSIS_KEYS"]
