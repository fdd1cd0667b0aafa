"""Web search provider implementations."""
from .providers import (
    BraveSearchProvider,
    DuckDuckGoProvider,
    HttpWebSearchProvider,
    SearxngProvider,
    SerpAPIProvider,
    SerperProvider,
    TavilyProvider,
    YouProvider,
    build_default_providers,
)

__all__ = [
    "HttpWebSearchProvider",
    "TavilyProvider",
    "BraveSearchProvider",
    "SerpAPIProvider",
    "SerperProvider",
    "DuckDuckGoProvider",
    "SearxngProvider",
    "YouProvider",
    "build_default_providers",
]
