"""Merged retriever - tier dispatch, exclusion and dedup."""

import logging
from typing import Optional

from ..exceptions import IndexUnavailableError
from ..models.document import Document
from ..models.retrieval import RetrievalTierKind, RetrieverOptions
from ..protocols.retriever import RetrievalTier
from ..strategies.dedup import DeduplicationStrategy
from ..strategies.exclusion import ExclusionStrategy
from ..strategies.scoring import ScoringStrategy

logger = logging.getLogger(__name__)


class MergedRetriever:
    """Route a query to one tier, then filter and dedup its output.

    Semantic search only answers fuzzy relevance queries. Time-scoped and
    tag-scoped enumeration always goes to the lexical tier so results are
    complete rather than similarity-thresholded.
    """

    def __init__(
        self,
        lexical: RetrievalTier,
        semantic: Optional[RetrievalTier] = None,
        enable_semantic: bool = False,
        excluded_paths: list[str] | None = None,
        strategies: list[ScoringStrategy] | None = None,
    ):
        """Initialize merged retriever.

        Args:
            lexical: Keyword tier.
            semantic: Embedding tier (optional).
            enable_semantic: Whether AUTO may pick the semantic tier.
            excluded_paths: Exclusion patterns applied to every result.
            strategies: Custom post-retrieval chain (default: exclusion, dedup).
        """
        self._tiers: dict[RetrievalTierKind, RetrievalTier] = {
            RetrievalTierKind.LEXICAL: lexical,
        }
        if semantic is not None:
            self._tiers[RetrievalTierKind.SEMANTIC] = semantic
        self._enable_semantic = enable_semantic

        self._strategies = strategies or [
            ExclusionStrategy(excluded_paths),
            DeduplicationStrategy(),
        ]

    @property
    def semantic_enabled(self) -> bool:
        return self._enable_semantic and RetrievalTierKind.SEMANTIC in self._tiers

    def choose_tier(self, has_time_range: bool, has_tag_terms: bool) -> RetrievalTierKind:
        """Pick the tier for an AUTO request."""
        if self.semantic_enabled and not has_time_range and not has_tag_terms:
            return RetrievalTierKind.SEMANTIC
        return RetrievalTierKind.LEXICAL

    def get_relevant_documents(
        self,
        query: str,
        options: RetrieverOptions,
        tier: RetrievalTierKind = RetrievalTierKind.AUTO,
    ) -> list[Document]:
        """Retrieve, exclude and dedup.

        Args:
            query: Raw query text.
            options: Planned retrieval options.
            tier: AUTO applies the dispatch policy; LEXICAL/SEMANTIC force one.

        Returns:
            Ranked, deduplicated documents.

        Raises:
            IndexUnavailableError: If the chosen tier cannot answer or is
                not configured.
        """
        if tier == RetrievalTierKind.AUTO:
            tier = self.choose_tier(
                has_time_range=options.time_range is not None,
                has_tag_terms=bool(options.tag_terms),
            )

        retriever = self._tiers.get(tier)
        if retriever is None:
            raise IndexUnavailableError(f"{tier.value} retrieval tier is not configured")

        logger.info(f"Retrieving via {tier.value} tier")
        documents = retriever.get_relevant_documents(query, options)

        for strategy in self._strategies:
            documents = strategy.apply(query, documents)

        logger.info(f"{tier.value} search found {len(documents)} documents for query: '{query[:50]}'")
        return documents
