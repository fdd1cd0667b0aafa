"""Web search models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass
class WebSearchResult:
    title: str
    url: str
    snippet: str
    content: Optional[str] = None


@dataclass
class WebSearchResponse:
    """Provider response. Some providers add an AI-generated answer."""
    query: str
    results: list[WebSearchResult] = field(default_factory=list)
    answer: Optional[str] = None


class WebSearchProviderName(str, Enum):
    TAVILY = "tavily"
    BRAVE = "brave"
    SERPAPI = "serpapi"
    SERPER = "serper"
    DUCKDUCKGO = "duckduckgo"
    SEARXNG = "searxng"
    YOU = "you"


@dataclass(frozen=True)
class ProviderInfo:
    """Static description of a provider's capabilities."""
    name: WebSearchProviderName
    display_name: str
    description: str
    requires_api_key: bool
    api_key_url: Optional[str] = None
    requires_base_url: bool = False


@dataclass
class WebSearchConfig:
    """Credentials and endpoints for web search providers."""
    provider: str = WebSearchProviderName.TAVILY.value
    api_keys: dict[str, str] = field(default_factory=dict)
    api_key: str = ""  # legacy single key, used when no per-provider key is set
    base_url: str = ""
    timeout: float = 30.0

    def api_key_for(self, provider_name: str) -> str:
        return (self.api_keys.get(provider_name) or self.api_key or "").strip()
