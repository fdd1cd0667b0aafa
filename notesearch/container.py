import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Embedding and vector components are only built when something
    resolves them, so a lexical-only setup never loads a model.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.models.web import WebSearchConfig
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.lexical_index import LexicalIndexProtocol
    from .core.protocols.llm import LLMProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.services.ingest_service import IngestService
    from .core.services.lexical_retriever import LexicalRetriever
    from .core.services.local_reranker import LocalReranker
    from .core.services.merged_retriever import MergedRetriever
    from .core.services.query_planner import QueryPlanner
    from .core.services.semantic_retriever import SemanticRetriever
    from .core.services.web_search_service import (
        WebSearchProviderRegistry,
        WebSearchService,
    )
    from .infrastructure.embeddings.sentence_transformer import (
        SentenceTransformerEmbedder,
    )
    from .infrastructure.lexical import BM25LexicalIndex
    from .infrastructure.llm.openai_client import OpenAIChatClient
    from .infrastructure.vector_stores.chroma_store import ChromaVectorStore
    from .infrastructure.web_search import build_default_providers
    from .presentation.tools import SearchTools, ToolRegistry

    container.register(
        EmbedderProtocol,
        lambda: SentenceTransformerEmbedder(settings.embedding_model),
        singleton=True,
    )

    container.register(
        VectorStoreProtocol,
        lambda: ChromaVectorStore(
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
        ),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            vault_path=settings.vault_path,
            embedder=(
                container.resolve(EmbedderProtocol)
                if settings.enable_semantic_search
                else None
            ),
            vector_store=(
                container.resolve(VectorStoreProtocol)
                if settings.enable_semantic_search
                else None
            ),
            excluded_paths=settings.vault_excluded_paths,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            batch_size=settings.ingest_batch_size,
            passage_prefix=settings.embedding_passage_prefix,
        ),
        singleton=True,
    )

    container.register(
        LexicalIndexProtocol,
        lambda: BM25LexicalIndex(container.resolve(IngestService).load_chunks),
        singleton=True,
    )

    container.register(
        LocalReranker,
        lambda: LocalReranker(
            embedder=container.resolve(EmbedderProtocol),
            query_prefix=settings.embedding_query_prefix,
            passage_prefix=settings.embedding_passage_prefix,
            max_chars=settings.rerank_max_chars,
        ),
        singleton=True,
    )

    container.register(
        LexicalRetriever,
        lambda: LexicalRetriever(container.resolve(LexicalIndexProtocol)),
        singleton=True,
    )

    container.register(
        SemanticRetriever,
        lambda: SemanticRetriever(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            lexical_index=container.resolve(LexicalIndexProtocol),
            reranker=container.resolve(LocalReranker),
            query_prefix=settings.embedding_query_prefix,
        ),
        singleton=True,
    )

    container.register(
        MergedRetriever,
        lambda: MergedRetriever(
            lexical=container.resolve(LexicalRetriever),
            semantic=(
                container.resolve(SemanticRetriever)
                if settings.enable_semantic_search
                else None
            ),
            enable_semantic=settings.enable_semantic_search,
            excluded_paths=settings.vault_excluded_paths,
        ),
        singleton=True,
    )

    container.register(
        QueryPlanner,
        lambda: QueryPlanner(default_max_k=settings.max_source_chunks),
        singleton=True,
    )

    web_config = WebSearchConfig(
        provider=settings.web_search_provider,
        api_keys=dict(settings.web_search_api_keys),
        api_key=settings.web_search_api_key,
        base_url=settings.web_search_base_url,
        timeout=settings.web_search_timeout,
    )

    container.register(
        WebSearchProviderRegistry,
        lambda: WebSearchProviderRegistry(build_default_providers(web_config)),
        singleton=True,
    )

    container.register(
        WebSearchService,
        lambda: WebSearchService(container.resolve(WebSearchProviderRegistry), web_config),
        singleton=True,
    )

    container.register(
        LLMProtocol,
        lambda: OpenAIChatClient(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            temperature=settings.llm_temperature,
        ),
        singleton=True,
    )

    container.register(
        SearchTools,
        lambda: SearchTools(
            retriever=container.resolve(MergedRetriever),
            planner=container.resolve(QueryPlanner),
            web_search=container.resolve(WebSearchService),
            llm=container.resolve(LLMProtocol),
            ingest=container.resolve(IngestService),
            lexical_index=container.resolve(LexicalIndexProtocol),
        ),
        singleton=True,
    )

    container.register(
        ToolRegistry,
        lambda: ToolRegistry(container.resolve(SearchTools).build_tools()),
        singleton=True,
    )

    logger.info("Container configured")
    return container
