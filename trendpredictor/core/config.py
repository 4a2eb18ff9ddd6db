"""Runtime configuration for Trend Predictor.

All credentials and tunables are collected once into an immutable
:class:`Settings` value which is then handed to each component. Nothing below
``Settings.from_env`` reads the process environment.
"""

from __future__ import annotations

import dataclasses
import os
from typing import Mapping, Optional, Tuple

from trendpredictor.core.errors import ConfigurationError
from trendpredictor.tools.environment import load_local_env

DEFAULT_SYMBOLS: Tuple[str, ...] = ("ITBEES", "RELIANCE", "TCS", "HDFC", "INFY")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _flag(raw: Optional[str], default: bool = False) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _number(raw: Optional[str], default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Expected a number, got {raw!r}") from exc


def _symbols(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_SYMBOLS
    parsed = tuple(chunk.strip().upper() for chunk in raw.split(",") if chunk.strip())
    return parsed or DEFAULT_SYMBOLS


@dataclasses.dataclass(frozen=True)
class Settings:
    """Credentials and knobs for one pipeline run."""

    ai_gateway_api_key: Optional[str] = None
    ai_gateway_base_url: str = "https://ai-gateway.vercel.sh/v1"
    model: str = "anthropic/claude-sonnet-4"
    temperature: float = 0.1
    max_steps: int = 5
    structured_output: bool = False

    stock_api_key: Optional[str] = None
    stock_api_base_url: str = "https://stock.indianapi.in"
    exa_api_key: Optional[str] = None
    http_timeout: float = 30.0

    gmail_user: Optional[str] = None
    gmail_app_password: Optional[str] = None
    mail_recipient: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465

    cron_secret: Optional[str] = None
    default_symbols: Tuple[str, ...] = DEFAULT_SYMBOLS

    symbol_delay: float = 2.0
    strict_json: bool = False
    isolate_failures: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, streamlit_secrets: bool = True) -> "Settings":
        """Build settings from ``environ`` (default: ``.env`` merged into ``os.environ``)."""
        if environ is None:
            load_local_env(streamlit_secrets=streamlit_secrets)
            environ = os.environ

        def get(name: str) -> Optional[str]:
            value = environ.get(name)
            return value.strip() if value and value.strip() else None

        return cls(
            ai_gateway_api_key=get("AI_GATEWAY_API_KEY"),
            ai_gateway_base_url=get("AI_GATEWAY_BASE_URL") or cls.ai_gateway_base_url,
            model=get("TREND_MODEL") or cls.model,
            max_steps=int(_number(get("TREND_MAX_STEPS"), cls.max_steps)),
            structured_output=_flag(get("TREND_STRUCTURED_OUTPUT")),
            stock_api_key=get("STOCK_API_KEY"),
            stock_api_base_url=get("STOCK_API_BASE_URL") or cls.stock_api_base_url,
            exa_api_key=get("EXA_API_KEY"),
            gmail_user=get("GMAIL_USER"),
            gmail_app_password=get("GMAIL_APP_PASSWORD"),
            # The misspelt name is what existing deployments have configured.
            mail_recipient=get("GMAIL_SEND_TO_USER") or get("GAMIL_SEND_TO_USER"),
            cron_secret=get("CRON_SECRET"),
            default_symbols=_symbols(get("TREND_DEFAULT_STOCKS")),
            symbol_delay=_number(get("TREND_SYMBOL_DELAY"), cls.symbol_delay),
            strict_json=_flag(get("TREND_STRICT_JSON")),
            isolate_failures=_flag(get("TREND_ISOLATE_FAILURES")),
        )

    @property
    def mail_configured(self) -> bool:
        return bool(self.gmail_user and self.gmail_app_password and self.mail_recipient)

    def require_gateway_key(self) -> str:
        if not self.ai_gateway_api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY environment variable is required")
        return self.ai_gateway_api_key


__all__ = ["DEFAULT_SYMBOLS", "Settings"]
