"""Web search provider protocol."""
from typing import Protocol, runtime_checkable

from ..models.web import ProviderInfo, WebSearchResponse


@runtime_checkable
class WebSearchProviderProtocol(Protocol):
    """Protocol for a web search provider."""

    info: ProviderInfo

    async def search(self, query: str) -> WebSearchResponse:
        """Run a web search.

        Raises:
            WebSearchNotConfiguredError: If credentials are missing.
            WebSearchError: On provider or network failure.
        """
        ...
