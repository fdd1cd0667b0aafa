"""Core business services."""
from .query_planner import QueryPlanner, extract_tag_terms, tag_matches
from .local_reranker import LocalReranker
from .lexical_retriever import LexicalRetriever
from .semantic_retriever import SemanticRetriever
from .merged_retriever import MergedRetriever
from .ingest_service import IngestService
from .web_search_service import WebSearchProviderRegistry, WebSearchService

__all__ = [
    "QueryPlanner",
    "extract_tag_terms",
    "tag_matches",
    "LocalReranker",
    "LexicalRetriever",
    "SemanticRetriever",
    "MergedRetriever",
    "IngestService",
    "WebSearchProviderRegistry",
    "WebSearchService",
]
