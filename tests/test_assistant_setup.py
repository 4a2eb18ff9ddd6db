"""Tests for the analyst prompt and the tool bindings handed to the model."""

from __future__ import annotations

from trendpredictor.assistant.setup import (
    TOOL_PARAMETERS,
    build_system_prompt,
    build_tool_dispatch,
    build_tool_schemas,
)
from trendpredictor.core.records import ANALYSIS_KEYS
from trendpredictor.core.results import CallResult
from trendpredictor.tools import ExaSearchClient, MarketDataClient
from trendpredictor.tools.market_data import DETAILS_FAILURE_MESSAGE


class FailingMarketClient(MarketDataClient):
    def __init__(self) -> None:
        super().__init__("key")
        self.requested: list = []

    def stock_details(self, name: str) -> CallResult:
        self.requested.append(name)
        return CallResult.failure("offline")


def test_system_prompt_embeds_time_and_record_keys() -> None:
    """The prompt carries the current time and every analysis record key."""

    prompt = build_system_prompt("18 October 2026, 09:30:00 AM IST")

    assert "CURRENT DATE & TIME (IST): 18 October 2026, 09:30:00 AM IST" in prompt
    for key in ANALYSIS_KEYS:
        assert f'"{key}"' in prompt
    assert "```json" in prompt


def test_exactly_three_tools_are_bound() -> None:
    """The dispatch table exposes the three tools with matching schemas."""

    dispatch = build_tool_dispatch(MarketDataClient("k"), ExaSearchClient("k"))
    schemas = build_tool_schemas(dispatch)

    names = [schema["function"]["name"] for schema in schemas]
    assert names == ["StockDetailsTool", "StockHistoryTool", "WebSearchTool"]
    assert set(names) == set(dispatch) == set(TOOL_PARAMETERS)
    for schema in schemas:
        assert schema["type"] == "function"
        assert schema["function"]["description"]
        assert schema["function"]["parameters"]["type"] == "object"


def test_dispatch_binds_tools_to_their_clients() -> None:
    """Calling a bound tool goes through the injected client."""

    market = FailingMarketClient()
    dispatch = build_tool_dispatch(market, ExaSearchClient("k"))

    assert dispatch["StockDetailsTool"](name="TCS") == DETAILS_FAILURE_MESSAGE
    assert market.requested == ["TCS"]


def test_structured_prompt_asks_for_a_bare_object() -> None:
    """JSON response mode swaps the fenced-block instruction for a bare object."""

    prompt = build_system_prompt("now", structured=True)

    assert "```json" not in prompt
    assert "single JSON object" in prompt
    for key in ANALYSIS_KEYS:
        assert f'"{key}"' in prompt
