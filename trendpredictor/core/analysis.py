"""Business logic for running the analyst agent over a list of symbols."""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from typing import Callable, Dict, List, Optional, Sequence

from trendpredictor.assistant import build_tool_dispatch, build_tool_schemas, run_agent
from trendpredictor.assistant.agent import create_client
from trendpredictor.core.config import Settings
from trendpredictor.core.errors import AnalysisParseError
from trendpredictor.core.notifier import EmailNotifier
from trendpredictor.core.pacing import SymbolPacer
from trendpredictor.core.results import CallResult
from trendpredictor.core.timeutil import current_ist_time
from trendpredictor.tools import ExaSearchClient, MarketDataClient

LOGGER = logging.getLogger(__name__)

COMPLETED_MESSAGE = "Stock analysis completed successfully"

_FENCED_JSON = re.compile(r"```json[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL)

AnalysisRecord = Dict[str, object]


def parse_symbols(raw: str) -> List[str]:
    """Parse a comma-separated string of tickers into a normalized list."""
    symbols: List[str] = []
    if not raw:
        return symbols

    for chunk in raw.split(","):
        symbol = chunk.strip().upper()
        if symbol:
            symbols.append(symbol)
    return symbols


def _last_json_object(text: str) -> Optional[AnalysisRecord]:
    """Return the last top-level JSON object embedded in ``text``, if any."""
    decoder = json.JSONDecoder()
    found: Optional[AnalysisRecord] = None
    position = text.find("{")
    while position != -1:
        try:
            parsed, end = decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            position = text.find("{", position + 1)
            continue
        if isinstance(parsed, dict):
            found = parsed
        position = text.find("{", end)
    return found


def extract_analysis(
    response_text: str,
    *,
    symbol: str = "",
    strict: bool = False,
    structured: bool = False,
) -> AnalysisRecord:
    """Pull the analysis record out of the model's reply.

    The first ```json fenced block wins. Without one the record is empty,
    unless ``structured`` is set, in which case the last JSON object in the
    reply is used; earlier tool-calling steps may have added prose before it.
    A block that does not decode raises :class:`AnalysisParseError` when
    ``strict``, otherwise it is logged and treated as empty.
    """
    text = response_text or ""
    match = _FENCED_JSON.search(text)
    if match is None:
        if structured:
            return _last_json_object(text) or {}
        return {}

    try:
        parsed = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        if strict:
            raise AnalysisParseError(symbol, str(exc)) from exc
        LOGGER.warning("Discarding malformed JSON block for %s: %s", symbol or "?", exc)
        return {}

    if not isinstance(parsed, dict):
        detail = f"expected a JSON object, got {type(parsed).__name__}"
        if strict:
            raise AnalysisParseError(symbol, detail)
        LOGGER.warning("Discarding analysis for %s: %s", symbol or "?", detail)
        return {}
    return parsed


@dataclasses.dataclass
class RunResult:
    """Outcome of one batch: one record per input symbol, in input order."""

    message: str
    results: List[AnalysisRecord]
    timestamp: str
    notification: Optional[CallResult] = None

    def as_dict(self) -> Dict[str, object]:
        return {"message": self.message, "results": self.results, "timestamp": self.timestamp}


class StockAnalyzer:
    """Sequential per-symbol analysis followed by a single notification."""

    def __init__(
        self,
        agent: Callable[[str], str],
        notifier,
        settings: Optional[Settings] = None,
        pacer: Optional[SymbolPacer] = None,
        clock: Callable[[], str] = current_ist_time,
    ) -> None:
        self.settings = settings or Settings()
        self.agent = agent
        self.notifier = notifier
        self.pacer = pacer or SymbolPacer(self.settings.symbol_delay)
        self._clock = clock

    def _analyze_symbol(self, symbol: str) -> AnalysisRecord:
        LOGGER.info("=== Analyzing %s ===", symbol)
        try:
            response_text = self.agent(symbol)
        except Exception:
            if not self.settings.isolate_failures:
                raise
            LOGGER.exception("Agent run failed for %s; recording an empty analysis", symbol)
            return {}

        record = extract_analysis(
            response_text,
            symbol=symbol,
            strict=self.settings.strict_json,
            structured=self.settings.structured_output,
        )
        LOGGER.info("Final result for %s: %s", symbol, record)
        return record

    def analyze(self, symbols: Sequence[str]) -> RunResult:
        records: List[AnalysisRecord] = []
        for index, symbol in enumerate(symbols):
            if index:
                self.pacer.pause()
            records.append(self._analyze_symbol(symbol))

        notification = self.notifier.notify(records)
        return RunResult(
            message=COMPLETED_MESSAGE,
            results=records,
            timestamp=self._clock(),
            notification=notification,
        )


def build_analyzer(settings: Settings) -> StockAnalyzer:
    """Wire the real OpenAI, market-data, search and email collaborators."""
    client = create_client(settings)
    market = MarketDataClient(
        settings.stock_api_key,
        base_url=settings.stock_api_base_url,
        timeout=settings.http_timeout,
    )
    search = ExaSearchClient(settings.exa_api_key, timeout=settings.http_timeout)
    tool_dispatch = build_tool_dispatch(market, search)
    tool_schemas = build_tool_schemas(tool_dispatch)

    def agent(symbol: str) -> str:
        return run_agent(
            symbol,
            client=client,
            tool_dispatch=tool_dispatch,
            settings=settings,
            tool_schemas=tool_schemas,
        )

    return StockAnalyzer(agent, EmailNotifier.from_settings(settings), settings=settings)


def analyze_stocks(symbols: Sequence[str], settings: Optional[Settings] = None) -> RunResult:
    """Analyze ``symbols`` with settings read from the environment by default."""
    return build_analyzer(settings or Settings.from_env()).analyze(symbols)


__all__ = [
    "COMPLETED_MESSAGE",
    "RunResult",
    "StockAnalyzer",
    "analyze_stocks",
    "build_analyzer",
    "extract_analysis",
    "parse_symbols",
]
