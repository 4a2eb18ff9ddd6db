"""
Trend Predictor HTTP API
========================

Endpoints
---------
POST /analyze                  (alias: POST /api/analyze-stocks)
    Body ``{"stocks": ["TCS", "INFY"]}``. Runs the full analysis and returns
    ``{message, results, timestamp}``.

GET /cron/trigger              (alias: GET /api/cron/stock-analysis)
    Requires ``Authorization: Bearer <CRON_SECRET>``. Analyzes the default
    symbol list and returns a short summary.

GET /health
    Liveness check.

Run locally
-----------
    uvicorn trendpredictor.api.app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import functools
import hmac
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from trendpredictor.core.analysis import StockAnalyzer, build_analyzer
from trendpredictor.core.config import Settings
from trendpredictor.core.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

SettingsFactory = Callable[[], Settings]
AnalyzerFactory = Callable[[Settings], StockAnalyzer]


def _error(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def _authorized(header: Optional[str], secret: Optional[str]) -> bool:
    if not secret or not header:
        return False
    return hmac.compare_digest(header.encode("utf-8"), f"Bearer {secret}".encode("utf-8"))


def _api_settings() -> Settings:
    return Settings.from_env(streamlit_secrets=False)


def create_app(
    settings_factory: SettingsFactory = _api_settings,
    analyzer_factory: AnalyzerFactory = build_analyzer,
) -> FastAPI:
    """Build the API; settings are loaded once, on the first request that needs them."""
    app = FastAPI(title="Trend Predictor API", version="1.0.0")
    current_settings = functools.lru_cache(maxsize=1)(settings_factory)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/analyze")
    @app.post("/api/analyze-stocks")
    async def analyze(request: Request):
        settings = current_settings()
        if not settings.ai_gateway_api_key:
            return _error(500, "AI_GATEWAY_API_KEY environment variable is required")

        try:
            body = await request.json()
        except ValueError:
            body = None
        stocks = body.get("stocks") if isinstance(body, dict) else None
        if not isinstance(stocks, list):
            return _error(400, "stocks array is required")

        LOGGER.info("Analyzing stocks: %s", stocks)
        try:
            analyzer = analyzer_factory(settings)
            result = await run_in_threadpool(analyzer.analyze, stocks)
        except ConfigurationError as exc:
            LOGGER.error("Configuration error: %s", exc)
            return _error(500, "Configuration error", str(exc))
        except Exception as exc:
            LOGGER.exception("Error in stock analysis API")
            return _error(500, "Internal server error", str(exc))
        return result.as_dict()

    @app.get("/cron/trigger")
    @app.get("/api/cron/stock-analysis")
    async def cron_trigger(request: Request):
        settings = current_settings()
        if not _authorized(request.headers.get("authorization"), settings.cron_secret):
            return _error(401, "Unauthorized")

        LOGGER.info("Cron job triggered")
        stocks = list(settings.default_symbols)
        try:
            analyzer = analyzer_factory(settings)
            result = await run_in_threadpool(analyzer.analyze, stocks)
        except Exception as exc:
            LOGGER.exception("Error in cron job")
            return _error(500, "Cron job failed", str(exc))

        completed = datetime.now(timezone.utc).isoformat()
        LOGGER.info("Cron job completed successfully at %s", completed)
        return {
            "message": "Cron job executed successfully",
            "timestamp": completed,
            "stocksAnalyzed": stocks,
            "analysisResult": len(result.results),
        }

    return app


app = create_app()

__all__ = ["app", "create_app"]
