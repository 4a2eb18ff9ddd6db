"""Unit tests for the web search tool and its result post-processing."""

from __future__ import annotations

import threading

import pytest
import requests

from trendpredictor.core.results import CallResult
from trendpredictor.tools import web_search
from trendpredictor.tools.web_search import (
    CONTENT_LIMIT,
    ExaSearchClient,
    WebSearchTool,
    build_search_options,
    clean_title,
    deduplicate_by_domain_and_url,
    extract_domain,
    truncate_content,
)


class DummyResponse:
    def __init__(self, payload: object = None, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self) -> object:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class RecordingSession:
    def __init__(self, response: object) -> None:
        self.response = response
        self.calls: list = []

    def post(self, url: str, **kwargs: object) -> DummyResponse:
        self.calls.append((url, kwargs))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class ScriptedSearchClient:
    """Stands in for ExaSearchClient; failures are keyed by query text."""

    def __init__(self, hits_by_query: dict, failing: tuple = ()) -> None:
        self.hits_by_query = hits_by_query
        self.failing = set(failing)
        self.calls: list = []
        self._lock = threading.Lock()

    def search(self, query: str, options: dict) -> CallResult:
        with self._lock:
            self.calls.append((query, options))
        if query in self.failing:
            return CallResult.failure("boom")
        return CallResult.success(self.hits_by_query.get(query, []))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("TCS Q2 results [Live] (Updated)", "TCS Q2 results"),
        ("  Reliance   shares\n\tjump  ", "Reliance shares jump"),
        ("[Video] Infosys (INFY) guidance [2025]", "Infosys guidance"),
        ("No brackets here", "No brackets here"),
        ("", ""),
    ],
)
def test_clean_title_strips_segments_and_whitespace(raw: str, expected: str) -> None:
    """Bracketed and parenthesised segments disappear and whitespace collapses."""

    assert clean_title(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "HDFC [Bank\nNews] rises (sharply)",
        "Unbalanced [ bracket (and paren",
        "Nested [outer (inner) outer] tail",
        "(a [b) c] d",
        "   spaced    out   ",
    ],
)
def test_clean_title_is_idempotent(raw: str) -> None:
    """Cleaning an already-cleaned title changes nothing."""

    once = clean_title(raw)
    assert clean_title(once) == once


def test_truncate_content_caps_length_and_accepts_short_or_missing_text() -> None:
    """Content is cut at 1000 characters and never errors on short input."""

    assert len(truncate_content("x" * 5000)) == CONTENT_LIMIT
    assert truncate_content("short") == "short"
    assert truncate_content("") == ""
    assert truncate_content(None) == ""


def test_extract_domain_handles_urls_and_bare_hosts() -> None:
    """The host is returned for http(s) URLs and the input otherwise."""

    assert extract_domain("https://www.moneycontrol.com/news/tcs?x=1") == "www.moneycontrol.com"
    assert extract_domain("HTTP://economictimes.indiatimes.com") == "economictimes.indiatimes.com"
    assert extract_domain("livemint.com") == "livemint.com"


def test_deduplicate_keeps_first_item_per_url_and_domain() -> None:
    """Later items sharing a URL or a domain with an earlier one are dropped."""

    items = [
        {"url": "https://a.com/1", "title": "first"},
        {"url": "https://a.com/2", "title": "same domain"},
        {"url": "https://b.com/1", "title": "second"},
        {"url": "https://b.com/1", "title": "same url"},
        {"url": "https://c.com/x", "title": "third"},
    ]

    kept = deduplicate_by_domain_and_url(items)

    assert [item["title"] for item in kept] == ["first", "second", "third"]
    urls = [item["url"] for item in kept]
    domains = [extract_domain(url) for url in urls]
    assert len(set(urls)) == len(urls)
    assert len(set(domains)) == len(domains)


def test_build_search_options_prefers_include_over_exclude() -> None:
    """Supplying both domain filters yields include-only behaviour."""

    options = build_search_options(
        "finance",
        5,
        include_domains=["https://www.nseindia.com/market", "moneycontrol.com"],
        exclude_domains=["reddit.com"],
    )

    assert options["includeDomains"] == ["www.nseindia.com", "moneycontrol.com"]
    assert "excludeDomains" not in options
    assert options["category"] == "financial report"
    assert options["numResults"] == 5


def test_build_search_options_general_topic_has_no_category() -> None:
    """General searches send no category and honour the exclude filter alone."""

    options = build_search_options("general", 10, exclude_domains=["https://reddit.com/r/x"])

    assert "category" not in options
    assert options["excludeDomains"] == ["reddit.com"]
    assert options["contents"] == {"text": True, "livecrawl": "preferred"}


def test_web_search_tool_isolates_failing_queries() -> None:
    """A failing query returns an empty list without affecting its siblings."""

    client = ScriptedSearchClient(
        {
            "tcs news": [
                {
                    "url": "https://news.example.com/a",
                    "title": "TCS wins deal [Exclusive]",
                    "text": "y" * 1500,
                    "publishedDate": "2025-01-02",
                    "author": "Desk",
                },
                {"url": "https://news.example.com/b", "title": "Duplicate domain", "text": ""},
            ],
        },
        failing=("tcs outlook",),
    )

    result = WebSearchTool(
        queries=["tcs news", "tcs outlook"],
        max_results=[3],
        topics=["news", "finance"],
        client=client,
    )

    first, second = result["searches"]
    assert first["query"] == "tcs news"
    assert first["results"] == [
        {
            "url": "https://news.example.com/a",
            "title": "TCS wins deal",
            "content": "y" * CONTENT_LIMIT,
            "published_date": "2025-01-02",
            "author": "Desk",
        }
    ]
    assert second == {"query": "tcs outlook", "results": []}

    options_by_query = dict(client.calls)
    assert options_by_query["tcs news"]["numResults"] == 3
    assert options_by_query["tcs news"]["category"] == "news"
    assert options_by_query["tcs outlook"]["numResults"] == 3
    assert options_by_query["tcs outlook"]["category"] == "financial report"


def test_web_search_tool_drops_published_date_outside_news() -> None:
    """Only news searches keep the published date; missing authors are omitted."""

    client = ScriptedSearchClient(
        {"infy filings": [{"url": "https://x.com/1", "title": "Filing", "text": "t", "publishedDate": "2025"}]}
    )

    result = WebSearchTool(queries=["infy filings"], max_results=[], topics=["finance"], client=client)

    assert result["searches"][0]["results"] == [{"url": "https://x.com/1", "title": "Filing", "content": "t"}]
    assert client.calls[0][1]["numResults"] == web_search.DEFAULT_MAX_RESULTS


def test_web_search_tool_defaults_unknown_topics_to_general() -> None:
    """Topics outside news/finance/general fall back to a general search."""

    client = ScriptedSearchClient({})

    WebSearchTool(queries=["q"], max_results=[5], topics=["crypto"], client=client)

    assert "category" not in client.calls[0][1]


def test_web_search_tool_with_no_queries_returns_empty() -> None:
    """An empty query list makes no outbound calls."""

    client = ScriptedSearchClient({})

    assert WebSearchTool(queries=[], max_results=[], topics=[], client=client) == {"searches": []}
    assert client.calls == []


def test_exa_client_posts_query_with_api_key() -> None:
    """The client posts the query and options with the x-api-key header."""

    session = RecordingSession(DummyResponse({"results": [{"url": "https://a.com"}]}))
    client = ExaSearchClient("exa-key", session=session, timeout=5)

    outcome = client.search("reliance", {"numResults": 2})

    assert outcome.ok
    assert outcome.value == [{"url": "https://a.com"}]
    url, kwargs = session.calls[0]
    assert url == web_search.EXA_SEARCH_URL
    assert kwargs["json"] == {"query": "reliance", "numResults": 2}
    assert kwargs["headers"] == {"x-api-key": "exa-key"}
    assert kwargs["timeout"] == 5


@pytest.mark.parametrize(
    "response",
    [
        DummyResponse({"error": "quota"}, status_code=429),
        DummyResponse(ValueError("not json")),
        requests.ConnectionError("offline"),
    ],
)
def test_exa_client_reports_failures_without_raising(response: object) -> None:
    """HTTP errors, bad bodies and transport errors become failure results."""

    client = ExaSearchClient("exa-key", session=RecordingSession(response))

    outcome = client.search("reliance", {})

    assert not outcome.ok
    assert outcome.reason


def test_web_search_tool_keeps_topic_and_cap_aligned_past_blank_queries() -> None:
    """A blank query is skipped without shifting later topics or caps."""

    client = ScriptedSearchClient({})

    result = WebSearchTool(
        queries=["", "tcs filings"],
        max_results=[2, 7],
        topics=["news", "finance"],
        client=client,
    )

    assert [search["query"] for search in result["searches"]] == ["tcs filings"]
    ((query, options),) = client.calls
    assert query == "tcs filings"
    assert options["category"] == "financial report"
    assert options["numResults"] == 7


class BarrierSearchClient(ScriptedSearchClient):
    """Blocks every search until all expected searches are in flight together."""

    def __init__(self, parties: int) -> None:
        super().__init__({})
        self.barrier = threading.Barrier(parties, timeout=2)

    def search(self, query: str, options: dict) -> CallResult:
        self.barrier.wait()
        return super().search(query, options)


def test_web_search_tool_runs_queries_concurrently() -> None:
    """All queries of one call are in flight at the same time."""

    queries = ["tcs news", "tcs outlook", "tcs results", "tcs order book"]
    client = BarrierSearchClient(len(queries))

    result = WebSearchTool(queries=queries, max_results=[3], topics=["news"], client=client)

    assert [search["query"] for search in result["searches"]] == queries
    assert not client.barrier.broken
    assert sorted(query for query, _options in client.calls) == sorted(queries)
