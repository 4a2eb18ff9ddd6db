"""Tools that read stock details and price history from the Indian stock API."""

from __future__ import annotations

import json
import logging
from typing import Dict, Optional

import requests

from trendpredictor.core.results import CallResult

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://stock.indianapi.in"
DETAILS_FAILURE_MESSAGE = "Failed to retrieve stock details"
HISTORY_FAILURE_MESSAGE = "Failed to retrieve historical data"


class MarketDataClient:
    """Thin ``requests`` wrapper that never raises on upstream failures."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, params: Dict[str, str]) -> CallResult:
        url = f"{self.base_url}{path}"
        LOGGER.info("Requesting %s with %s", url, params)
        try:
            response = self.session.get(
                url,
                params=params,
                headers={"x-api-key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("Market data request to %s failed: %s", url, exc)
            return CallResult.failure(str(exc))
        return CallResult.success(payload)

    def stock_details(self, name: str) -> CallResult:
        return self._get("/stock", {"name": name})

    def stock_history(self, name: str, period: str = "1yr") -> CallResult:
        return self._get(
            "/historical_data",
            {"stock_name": name, "period": period, "filter": "price"},
        )


def StockDetailsTool(name: str, client: MarketDataClient) -> str:
    """Get details for a specific stock, such as current price, key ratios and recent news."""
    LOGGER.info("StockDetailsTool called for %s", name)
    outcome = client.stock_details(name)
    if not outcome.ok:
        LOGGER.warning("StockDetailsTool failed for %s: %s", name, outcome.reason)
        return DETAILS_FAILURE_MESSAGE
    return json.dumps(outcome.value, indent=2)


def StockHistoryTool(name: str, client: MarketDataClient, period: str = "1yr") -> str:
    """Get historical price data for a specific stock over a period (1m, 6m, 1yr, 3yr, 5yr)."""
    LOGGER.info("StockHistoryTool called for %s, period %s", name, period)
    outcome = client.stock_history(name, period or "1yr")
    if not outcome.ok:
        LOGGER.warning("StockHistoryTool failed for %s (%s): %s", name, period, outcome.reason)
        return HISTORY_FAILURE_MESSAGE
    return json.dumps(outcome.value, indent=2)


__all__ = [
    "DETAILS_FAILURE_MESSAGE",
    "HISTORY_FAILURE_MESSAGE",
    "MarketDataClient",
    "StockDetailsTool",
    "StockHistoryTool",
]
