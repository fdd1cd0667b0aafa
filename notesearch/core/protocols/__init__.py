"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .vector_store import VectorStoreProtocol
from .lexical_index import LexicalIndexProtocol
from .llm import LLMProtocol
from .retriever import RetrievalTier
from .web_search import WebSearchProviderProtocol

__all__ = [
    "EmbedderProtocol",
    "VectorStoreProtocol",
    "LexicalIndexProtocol",
    "LLMProtocol",
    "RetrievalTier",
    "WebSearchProviderProtocol",
]
