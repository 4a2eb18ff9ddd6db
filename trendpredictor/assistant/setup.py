"""System prompt and tool bindings for the Trend Predictor analyst agent."""

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, List, Optional

from trendpredictor.core.records import ANALYSIS_KEYS
from trendpredictor.core.timeutil import current_ist_time
from trendpredictor.tools import (
    ExaSearchClient,
    MarketDataClient,
    StockDetailsTool,
    StockHistoryTool,
    WebSearchTool,
)

_SYSTEM_PROMPT_TEMPLATE = """You are an expert analyst of stocks listed on the NSE (National Stock Exchange of India) \
and a positional/swing trading advisor with access to live Indian market data.

CURRENT DATE & TIME (IST): {current_time}

AVAILABLE TOOLS:
1. StockDetailsTool - current stock details: {{"name": "STOCK_NAME"}}
2. StockHistoryTool - price history: {{"name": "STOCK_NAME", "period": "1m|6m|1yr|3yr|5yr"}} (default 1yr)
3. WebSearchTool - web search: {{"queries": ["Q1", "Q2"], "max_results": [5, 5], "topics": ["news", "finance"], \
"include_domains": [], "exclude_domains": []}}

MANDATORY PROCESS:
1. Call StockDetailsTool first.
2. Call StockHistoryTool once for the same stock.
3. Call WebSearchTool once with all of your queries for the latest news and sentiment.
4. Never call a tool more than once for the same stock and never invent data.
5. Base every price on the current price returned by StockDetailsTool.

ANALYSIS FRAMEWORK (holding period 1-4 weeks):
- Chart patterns, support and resistance, 20/50/200 EMA trend, volume behaviour,
  RSI(14), MACD and stochastic momentum.
- Classify the setup as Breakout, Pullback, Reversal or Continuation.
- Weigh earnings, corporate actions, sector news, FII/DII flows and market volatility.

PRICE RULES:
- Entry price within 1-2% of the current price.
- Stop loss 3-5% below the current price for long positions.
- Target price = entry price + 2 to 3 times (entry price - stop loss).
- Round every price to 2 decimal places.

RESPONSE FORMAT:
{response_format}
{keys}
"""

_FENCED_RESPONSE_FORMAT = "Reply with a single fenced ```json block and nothing else. The object must have exactly these keys:"
_OBJECT_RESPONSE_FORMAT = (
    "Reply with a single JSON object and nothing else, without code fences. "
    "The object must have exactly these keys:"
)


def build_system_prompt(current_time: Optional[str] = None, structured: bool = False) -> str:
    """Render the analyst instructions with the current IST time.

    ``structured`` switches the reply contract from a fenced block to a bare
    JSON object, matching the provider's JSON response mode.
    """
    keys = "\n".join(f'- "{key}"' for key in ANALYSIS_KEYS)
    return _SYSTEM_PROMPT_TEMPLATE.format(
        current_time=current_time or current_ist_time(),
        response_format=_OBJECT_RESPONSE_FORMAT if structured else _FENCED_RESPONSE_FORMAT,
        keys=keys,
    )


_STRING = {"type": "string"}

TOOL_PARAMETERS: Dict[str, Dict[str, Any]] = {
    "StockDetailsTool": {
        "type": "object",
        "properties": {
            "name": {**_STRING, "description": "Name or NSE symbol of the stock (e.g. 'Tata Steel')."},
        },
        "required": ["name"],
    },
    "StockHistoryTool": {
        "type": "object",
        "properties": {
            "name": {**_STRING, "description": "Name or NSE symbol of the stock (e.g. 'Infosys')."},
            "period": {
                **_STRING,
                "description": "Time period: '1m', '6m', '1yr', '3yr' or '5yr'. Default is '1yr'.",
            },
        },
        "required": ["name"],
    },
    "WebSearchTool": {
        "type": "object",
        "properties": {
            "queries": {
                "type": "array",
                "items": _STRING,
                "description": "Search queries to run in parallel, usually 3 to 5.",
            },
            "max_results": {
                "type": "array",
                "items": {"type": "integer"},
                "description": "Maximum number of results per query. Default is 5.",
            },
            "topics": {
                "type": "array",
                "items": {"type": "string", "enum": ["news", "finance", "general"]},
                "description": "Topic per query. Default is general.",
            },
            "include_domains": {
                "type": "array",
                "items": _STRING,
                "description": "Only return results from these domains.",
            },
            "exclude_domains": {
                "type": "array",
                "items": _STRING,
                "description": "Never return results from these domains. Ignored when include_domains is set.",
            },
        },
        "required": ["queries", "max_results", "topics"],
    },
}


def _build_function_tool_schema(func: Callable[..., object]) -> Dict[str, Any]:
    """Helper to build the function tool schema for the chat completions API."""
    target = getattr(func, "func", func)
    description = target.__doc__.strip() if target.__doc__ else ""
    return {
        "type": "function",
        "function": {
            "name": target.__name__,
            "description": description,
            "parameters": TOOL_PARAMETERS[target.__name__],
        },
    }


def build_tool_dispatch(
    market: MarketDataClient,
    search: ExaSearchClient,
) -> Dict[str, Callable[..., object]]:
    """Bind each tool to its client, keyed by the name the model calls it with."""
    return {
        "StockDetailsTool": functools.partial(StockDetailsTool, client=market),
        "StockHistoryTool": functools.partial(StockHistoryTool, client=market),
        "WebSearchTool": functools.partial(WebSearchTool, client=search),
    }


def build_tool_schemas(tool_dispatch: Dict[str, Callable[..., object]]) -> List[Dict[str, Any]]:
    return [_build_function_tool_schema(func) for func in tool_dispatch.values()]


__all__ = [
    "TOOL_PARAMETERS",
    "build_system_prompt",
    "build_tool_dispatch",
    "build_tool_schemas",
]
