"""Domain models."""
from .document import Document, NoteChunk, RerankResponse, RerankResult, TimeRange
from .retrieval import RetrievalTierKind, RetrieverOptions
from .web import (
    ProviderInfo,
    WebSearchConfig,
    WebSearchProviderName,
    WebSearchResponse,
    WebSearchResult,
)
from .chat import ChatMessage

__all__ = [
    "Document",
    "NoteChunk",
    "RerankResponse",
    "RerankResult",
    "TimeRange",
    "RetrievalTierKind",
    "RetrieverOptions",
    "WebSearchResponse",
    "WebSearchResult",
    "WebSearchConfig",
    "WebSearchProviderName",
    "ProviderInfo",
    "ChatMessage",
]
