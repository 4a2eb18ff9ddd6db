"""Data-gathering tools available to the Trend Predictor agent."""

from .market_data import MarketDataClient, StockDetailsTool, StockHistoryTool
from .web_search import ExaSearchClient, WebSearchTool

__all__ = [
    "ExaSearchClient",
    "MarketDataClient",
    "StockDetailsTool",
    "StockHistoryTool",
    "WebSearchTool",
]
