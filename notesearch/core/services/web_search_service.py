"""Web search service - provider registry and failure handling."""

import logging
from typing import Iterable, Optional

from ..models.web import WebSearchConfig, WebSearchProviderName, WebSearchResponse
from ..protocols.web_search import WebSearchProviderProtocol

logger = logging.getLogger(__name__)

DEFAULT_WEB_SEARCH_PROVIDER = WebSearchProviderName.TAVILY.value


class WebSearchProviderRegistry:
    """Caller-owned map of provider name to provider."""

    def __init__(
        self,
        providers: Iterable[WebSearchProviderProtocol] = (),
        default: str = DEFAULT_WEB_SEARCH_PROVIDER,
    ):
        self._providers: dict[str, WebSearchProviderProtocol] = {}
        self._default = default
        for provider in providers:
            self.register(provider)

    def register(self, provider: WebSearchProviderProtocol) -> None:
        self._providers[provider.info.name.value] = provider

    def names(self) -> list[str]:
        return list(self._providers)

    def find(self, name: str) -> Optional[WebSearchProviderProtocol]:
        """Exact lookup, no fallback."""
        return self._providers.get(name)

    def get(self, name: Optional[str]) -> WebSearchProviderProtocol:
        """Lookup with fallback to the default provider.

        Raises:
            KeyError: If neither the provider nor the default is registered.
        """
        name = name or self._default
        provider = self._providers.get(name)
        if provider is None:
            logger.info(f'Web search provider "{name}" not found, falling back to default')
            provider = self._providers.get(self._default)
        if provider is None:
            raise KeyError(f"No web search provider registered for '{name}'")
        return provider

    def is_configured(self, name: Optional[str], config: WebSearchConfig) -> bool:
        """Whether the named provider has what it needs to run."""
        provider = self.find(name or self._default)
        if provider is None:
            return False

        info = provider.info
        if info.requires_base_url:
            return bool(config.base_url.strip())
        if info.requires_api_key:
            return bool(config.api_key_for(info.name.value))
        return True


class WebSearchService:
    """Run web searches and turn failures into answer messages."""

    def __init__(self, registry: WebSearchProviderRegistry, config: WebSearchConfig):
        """Initialize web search service.

        Args:
            registry: Available providers.
            config: Selected provider, keys and endpoints.
        """
        self._registry = registry
        self._config = config

    def is_configured(self) -> bool:
        return self._registry.is_configured(self._config.provider, self._config)

    def _not_configured_message(self) -> str:
        name = self._config.provider or DEFAULT_WEB_SEARCH_PROVIDER
        provider = self._registry.find(name)
        display_name = provider.info.display_name if provider else name

        message = f'Web search provider "{display_name}" is not configured.'
        if provider is not None:
            if provider.info.requires_api_key and provider.info.api_key_url:
                message += (
                    f" Please add your API key in settings. Get one at {provider.info.api_key_url}"
                )
            elif provider.info.requires_base_url:
                message += " Please set your SearXNG instance URL in settings."
        return message

    async def search(self, query: str) -> WebSearchResponse:
        """Search the web with the configured provider.

        Never raises for provider problems: a missing configuration or a
        failed request comes back as empty results with an answer message.
        """
        if not self.is_configured():
            message = self._not_configured_message()
            logger.error(message)
            return WebSearchResponse(query=query, results=[], answer=message)

        provider = self._registry.get(self._config.provider)
        logger.info(f"Performing web search using provider: {provider.info.display_name}")

        try:
            response = await provider.search(query)
        except Exception as e:
            logger.error(f"Web search failed with provider {provider.info.name.value}: {e}")
            return WebSearchResponse(
                query=query,
                results=[],
                answer=str(e) or "Web search failed with unknown error",
            )

        logger.info(f"Web search returned {len(response.results)} results")
        return response
