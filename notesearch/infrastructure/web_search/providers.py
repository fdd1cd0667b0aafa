"""Web search providers over httpx."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from notesearch.core.exceptions import WebSearchError, WebSearchNotConfiguredError
from notesearch.core.models.web import (
    ProviderInfo,
    WebSearchConfig,
    WebSearchProviderName,
    WebSearchResponse,
    WebSearchResult,
)

logger = logging.getLogger(__name__)

MAX_RESULTS = 10


class HttpWebSearchProvider(ABC):
    """Base class: config lookup and JSON requests."""

    info: ProviderInfo

    def __init__(self, config: WebSearchConfig, client: Optional[httpx.AsyncClient] = None):
        """Initialize provider.

        Args:
            config: Keys and endpoints.
            client: Shared HTTP client. A short-lived one is used when None.
        """
        self._config = config
        self._client = client

    @property
    def name(self) -> str:
        return self.info.name.value

    def _require_api_key(self) -> str:
        api_key = self._config.api_key_for(self.name)
        if not api_key:
            raise WebSearchNotConfiguredError(
                f"{self.info.display_name} API key not configured. "
                f"Get one at {self.info.api_key_url}"
            )
        return api_key

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> dict:
        try:
            if self._client is not None:
                resp = await self._client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                    resp = await client.request(method, url, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise WebSearchError(
                f"{self.info.display_name} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise WebSearchError(f"{self.info.display_name} request failed: {e}") from e
        except ValueError as e:
            raise WebSearchError(f"{self.info.display_name} returned invalid JSON") from e

    @abstractmethod
    async def search(self, query: str) -> WebSearchResponse:
        """Run one query and map the response."""
        ...


class TavilyProvider(HttpWebSearchProvider):
    info = ProviderInfo(
        name=WebSearchProviderName.TAVILY,
        display_name="Tavily Search",
        description="AI-powered search API optimized for LLMs. Free tier: 1000 searches/month.",
        requires_api_key=True,
        api_key_url="https://app.tavily.com/home",
    )

    async def search(self, query: str) -> WebSearchResponse:
        api_key = self._require_api_key()
        data = await self._request_json(
            "POST",
            "https://api.tavily.com/search",
            json={
                "api_key": api_key,
                "query": query,
                "search_depth": "advanced",
                "include_answer": True,
                "include_raw_content": False,
                "max_results": MAX_RESULTS,
            },
        )
        return WebSearchResponse(
            query=query,
            answer=data.get("answer"),
            results=[
                WebSearchResult(
                    title=r.get("title", ""),
                    url=r.get("url", ""),
                    snippet=r.get("content", ""),
                    content=r.get("raw_content"),
                )
                for r in data.get("results") or []
            ],
        )


class BraveSearchProvider(HttpWebSearchProvider):
    info = ProviderInfo(
        name=WebSearchProviderName.BRAVE,
        display_name="Brave Search",
        description="Privacy-focused search API. Free tier: 2000 searches/month.",
        requires_api_key=True,
        api_key_url="https://brave.com/search/api/",
    )

    async def search(self, query: str) -> WebSearchResponse:
        api_key = self._require_api_key()
        data = await self._request_json(
            "GET",
            "https://api.search.brave.com/res/v1/web/search",
            params={"q": query, "count": MAX_RESULTS},
            headers={"Accept": "application/json", "X-Subscription-Token": api_key},
        )
        return WebSearchResponse(
            query=query,
            results=[
                WebSearchResult(
                    title=r.get("title", ""),
                    url=r.get("url", ""),
                    snippet=r.get("description", ""),
                )
                for r in (data.get("web") or {}).get("results") or []
            ],
        )


class SerpAPIProvider(HttpWebSearchProvider):
    info = ProviderInfo(
        name=WebSearchProviderName.SERPAPI,
        display_name="SerpAPI (Google)",
        description="Google Search results via SerpAPI. Free tier: 100 searches/month.",
        requires_api_key=True,
        api_key_url="https://serpapi.com/manage-api-key",
    )

    async def search(self, query: str) -> WebSearchResponse:
        api_key = self._require_api_key()
        data = await self._request_json(
            "GET",
            "https://serpapi.com/search.json",
            params={"q": query, "api_key": api_key, "num": MAX_RESULTS},
        )
        answer_box = data.get("answer_box") or {}
        return WebSearchResponse(
            query=query,
            answer=answer_box.get("answer") or answer_box.get("snippet"),
            results=[
                WebSearchResult(
                    title=r.get("title", ""),
                    url=r.get("link", ""),
                    snippet=r.get("snippet", ""),
                )
                for r in data.get("organic_results") or []
            ],
        )


class SerperProvider(HttpWebSearchProvider):
    info = ProviderInfo(
        name=WebSearchProviderName.SERPER,
        display_name="Serper.dev (Google)",
        description="Fast Google Search API. Free tier: 2500 searches.",
        requires_api_key=True,
        api_key_url="https://serper.dev/api-key",
    )

    async def search(self, query: str) -> WebSearchResponse:
        api_key = self._require_api_key()
        data = await self._request_json(
            "POST",
            "https://google.serper.dev/search",
            json={"q": query, "num": MAX_RESULTS},
            headers={"X-API-KEY": api_key},
        )
        answer_box = data.get("answerBox") or {}
        return WebSearchResponse(
            query=query,
            answer=answer_box.get("answer") or answer_box.get("snippet"),
            results=[
                WebSearchResult(
                    title=r.get("title", ""),
                    url=r.get("link", ""),
                    snippet=r.get("snippet", ""),
                )
                for r in data.get("organic") or []
            ],
        )


class DuckDuckGoProvider(HttpWebSearchProvider):
    """Instant answer API. No key, limited results."""

    info = ProviderInfo(
        name=WebSearchProviderName.DUCKDUCKGO,
        display_name="DuckDuckGo (Free)",
        description="Privacy-focused search. Free, no API key required. Limited results.",
        requires_api_key=False,
    )

    async def search(self, query: str) -> WebSearchResponse:
        data = await self._request_json(
            "GET",
            "https://api.duckduckgo.com/",
            params={"q": query, "format": "json", "no_html": 1, "skip_disambig": 1},
        )
        results = []

        if data.get("AbstractText"):
            results.append(
                WebSearchResult(
                    title=data.get("Heading") or query,
                    url=data.get("AbstractURL") or "",
                    snippet=data["AbstractText"],
                )
            )

        for topic in (data.get("RelatedTopics") or [])[:8]:
            text = topic.get("Text")
            url = topic.get("FirstURL")
            if text and url:
                results.append(
                    WebSearchResult(
                        title=text.split(" - ")[0] or text,
                        url=url,
                        snippet=text,
                    )
                )

        return WebSearchResponse(
            query=query,
            answer=data.get("AbstractText") or None,
            results=results,
        )


class SearxngProvider(HttpWebSearchProvider):
    """Self-hosted metasearch instance."""

    info = ProviderInfo(
        name=WebSearchProviderName.SEARXNG,
        display_name="SearXNG (Self-hosted)",
        description="Privacy-respecting metasearch engine. Use your own instance.",
        requires_api_key=False,
        requires_base_url=True,
    )

    async def search(self, query: str) -> WebSearchResponse:
        base_url = self._config.base_url.strip().rstrip("/")
        if not base_url:
            raise WebSearchNotConfiguredError(
                "SearXNG base URL not configured. "
                "Please set the URL of your SearXNG instance in settings."
            )

        data = await self._request_json(
            "GET",
            f"{base_url}/search",
            params={"q": query, "format": "json"},
            headers={"Accept": "application/json"},
        )
        return WebSearchResponse(
            query=query,
            results=[
                WebSearchResult(
                    title=r.get("title", ""),
                    url=r.get("url", ""),
                    snippet=r.get("content", ""),
                )
                for r in (data.get("results") or [])[:MAX_RESULTS]
            ],
        )


class YouProvider(HttpWebSearchProvider):
    info = ProviderInfo(
        name=WebSearchProviderName.YOU,
        display_name="You.com",
        description="AI-optimized search API with web and news results. Great for RAG applications.",
        requires_api_key=True,
        api_key_url="https://you.com/platform/api-keys",
    )

    async def search(self, query: str) -> WebSearchResponse:
        api_key = self._require_api_key()
        data = await self._request_json(
            "GET",
            "https://api.ydc-index.io/search",
            params={"query": query},
            headers={"X-API-Key": api_key},
        )

        results = []
        hits = data.get("hits")
        if isinstance(hits, list):
            for hit in hits[:MAX_RESULTS]:
                snippet = " ".join(hit.get("snippets") or [])[:500]
                results.append(
                    WebSearchResult(
                        title=hit.get("title") or "",
                        url=hit.get("url") or "",
                        snippet=snippet or hit.get("description") or "",
                    )
                )

        return WebSearchResponse(query=query, results=results)


PROVIDER_CLASSES: tuple[type[HttpWebSearchProvider], ...] = (
    TavilyProvider,
    BraveSearchProvider,
    SerpAPIProvider,
    SerperProvider,
    DuckDuckGoProvider,
    SearxngProvider,
    YouProvider,
)


def build_default_providers(
    config: WebSearchConfig, client: Optional[httpx.AsyncClient] = None
) -> list[HttpWebSearchProvider]:
    """One instance of every built-in provider."""
    return [cls(config, client) for cls in PROVIDER_CLASSES]
