"""Web search tool backed by the Exa search-and-contents API."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence

import requests

from trendpredictor.core.results import CallResult

LOGGER = logging.getLogger(__name__)

EXA_SEARCH_URL = "https://api.exa.ai/search"
CONTENT_LIMIT = 1000
DEFAULT_MAX_RESULTS = 10
TOPICS = ("news", "finance", "general")

_TOPIC_CATEGORIES = {"finance": "financial report", "news": "news"}
_DOMAIN_PATTERN = re.compile(r"^https?://([^/?#]+)(?:[/?#]|$)", re.IGNORECASE)
_BRACKETED = re.compile(r"\[.*?\]", re.DOTALL)
_PARENTHESISED = re.compile(r"\(.*?\)", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")


def extract_domain(url: str) -> str:
    """Return the host part of ``url``, or ``url`` itself when it is not an http(s) URL."""
    match = _DOMAIN_PATTERN.match(url or "")
    return match.group(1) if match else url


def clean_title(title: str) -> str:
    """Drop ``[...]`` and ``(...)`` segments and collapse whitespace."""
    cleaned = _BRACKETED.sub("", title or "")
    cleaned = _PARENTHESISED.sub("", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def truncate_content(text: Optional[str], limit: int = CONTENT_LIMIT) -> str:
    return (text or "")[:limit]


def deduplicate_by_domain_and_url(items: Iterable[Dict[str, object]]) -> List[Dict[str, object]]:
    """Keep the first item per URL and per domain, preserving order."""
    seen_urls = set()
    seen_domains = set()
    kept: List[Dict[str, object]] = []
    for item in items:
        url = str(item.get("url") or "")
        domain = extract_domain(url)
        if url in seen_urls or domain in seen_domains:
            continue
        seen_urls.add(url)
        seen_domains.add(domain)
        kept.append(item)
    return kept


class ExaSearchClient:
    """Issue one Exa ``/search`` request with page contents."""

    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 30.0,
        url: str = EXA_SEARCH_URL,
    ) -> None:
        self.api_key = api_key or ""
        self.session = session or requests.Session()
        self.timeout = timeout
        self.url = url

    def search(self, query: str, options: Dict[str, object]) -> CallResult:
        body = {"query": query, **options}
        try:
            response = self.session.post(
                self.url,
                json=body,
                headers={"x-api-key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("Exa search error for query %r: %s", query, exc)
            return CallResult.failure(str(exc))
        results = payload.get("results", []) if isinstance(payload, dict) else []
        return CallResult.success(results if isinstance(results, list) else [])


def build_search_options(
    topic: str,
    max_results: int,
    include_domains: Optional[Sequence[str]] = None,
    exclude_domains: Optional[Sequence[str]] = None,
) -> Dict[str, object]:
    """Translate tool arguments into an Exa request body (minus the query)."""
    options: Dict[str, object] = {
        "type": "auto",
        "numResults": max_results,
        "contents": {"text": True, "livecrawl": "preferred"},
    }
    category = _TOPIC_CATEGORIES.get(topic)
    if category:
        options["category"] = category

    # Exa accepts only one of the two filters.
    if include_domains:
        options["includeDomains"] = [extract_domain(domain) for domain in include_domains]
    elif exclude_domains:
        options["excludeDomains"] = [extract_domain(domain) for domain in exclude_domains]
    return options


def _normalize_hit(hit: Dict[str, object], topic: str) -> Dict[str, object]:
    item: Dict[str, object] = {
        "url": hit.get("url") or "",
        "title": clean_title(str(hit.get("title") or "")),
        "content": truncate_content(str(hit.get("text") or "")),
    }
    if topic == "news" and hit.get("publishedDate"):
        item["published_date"] = hit["publishedDate"]
    if hit.get("author"):
        item["author"] = hit["author"]
    return item


def _pick(values: Optional[Sequence], index: int):
    if not values:
        return None
    if index < len(values) and values[index]:
        return values[index]
    return values[0] or None


def _run_query(
    client: ExaSearchClient,
    query: str,
    topic: str,
    max_results: int,
    include_domains: Optional[Sequence[str]],
    exclude_domains: Optional[Sequence[str]],
) -> Dict[str, object]:
    options = build_search_options(topic, max_results, include_domains, exclude_domains)
    outcome = client.search(query, options)
    if not outcome.ok:
        LOGGER.info("Failed search for query: %s", query)
        return {"query": query, "results": []}

    hits = [_normalize_hit(hit, topic) for hit in outcome.value if isinstance(hit, dict)]
    LOGGER.info("Completed search for query: %s - found %d results", query, len(hits))
    return {"query": query, "results": deduplicate_by_domain_and_url(hits)}


def WebSearchTool(
    queries: Sequence[str],
    max_results: Sequence[int],
    topics: Sequence[str],
    client: ExaSearchClient,
    include_domains: Optional[Sequence[str]] = None,
    exclude_domains: Optional[Sequence[str]] = None,
) -> Dict[str, object]:
    """Search the web for news and finance coverage using several queries at once."""
    # Topics and caps are parallel to the original query list, blanks included.
    indexed = [(index, query) for index, query in enumerate(queries or []) if query]
    LOGGER.info(
        "WebSearchTool called with %d queries (topics=%s, include=%s, exclude=%s)",
        len(indexed),
        list(topics or []),
        list(include_domains or []),
        list(exclude_domains or []),
    )
    if not indexed:
        return {"searches": []}

    jobs = []
    for index, query in indexed:
        topic = _pick(topics, index) or "general"
        if topic not in TOPICS:
            topic = "general"
        try:
            cap = int(_pick(max_results, index) or DEFAULT_MAX_RESULTS)
        except (TypeError, ValueError):
            cap = DEFAULT_MAX_RESULTS
        jobs.append((query, topic, max(cap, 1)))

    with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
        futures = [
            pool.submit(_run_query, client, query, topic, cap, include_domains, exclude_domains)
            for query, topic, cap in jobs
        ]
        searches = [future.result() for future in futures]

    return {"searches": searches}


__all__ = [
    "CONTENT_LIMIT",
    "ExaSearchClient",
    "WebSearchTool",
    "build_search_options",
    "clean_title",
    "deduplicate_by_domain_and_url",
    "extract_domain",
    "truncate_content",
]
