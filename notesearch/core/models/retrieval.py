"""Retrieval request models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ...config.constants import RERANKER_THRESHOLD, TEXT_WEIGHT
from .document import TimeRange


class RetrievalTierKind(str, Enum):
    """Which retrieval tier answers a query."""
    AUTO = "auto"
    LEXICAL = "lexical"
    SEMANTIC = "semantic"


@dataclass
class RetrieverOptions:
    """Per-query retrieval options built by the query planner."""
    min_similarity_score: float
    max_k: int
    salient_terms: list[str] = field(default_factory=list)
    tag_terms: list[str] = field(default_factory=list)
    time_range: Optional[TimeRange] = None
    text_weight: float = TEXT_WEIGHT
    return_all: bool = False
    return_all_tags: bool = False
    use_reranker_threshold: float = RERANKER_THRESHOLD

    @property
    def should_return_all(self) -> bool:
        return self.return_all or self.return_all_tags

    @property
    def plain_terms(self) -> list[str]:
        """Salient terms that are not tags."""
        tags = set(self.tag_terms)
        return [t for t in self.salient_terms if t not in tags]
