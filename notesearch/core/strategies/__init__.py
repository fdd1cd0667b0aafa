"""Scoring, filtering and rerank strategies."""
from .scoring import (
    MinScoreStrategy,
    ScoringStrategy,
    max_normalize,
    sort_documents,
)
from .exclusion import ExclusionStrategy, is_path_excluded
from .dedup import DeduplicationStrategy, deduplicate_documents
from .rerank import (
    EmbeddingRerankStrategy,
    RankDecayStrategy,
    RerankStrategy,
    cosine_similarity,
    rerank_with_strategies,
)

__all__ = [
    "ScoringStrategy",
    "MinScoreStrategy",
    "max_normalize",
    "sort_documents",
    "ExclusionStrategy",
    "is_path_excluded",
    "DeduplicationStrategy",
    "deduplicate_documents",
    "RerankStrategy",
    "EmbeddingRerankStrategy",
    "RankDecayStrategy",
    "cosine_similarity",
    "rerank_with_strategies",
]
