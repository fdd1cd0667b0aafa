"""Local reranker - embedding similarity reranking with no external API."""

import logging
import time
from dataclasses import replace
from typing import Optional

from ..models.document import Document, RerankResponse
from ..protocols.embedder import EmbedderProtocol
from ..strategies.rerank import (
    EmbeddingRerankStrategy,
    RankDecayStrategy,
    RerankStrategy,
    rerank_with_strategies,
)

logger = logging.getLogger(__name__)


class LocalReranker:
    """Rerank passages with the configured embedding model.

    Strategies run in order; the rank-decay strategy closes the chain so a
    broken embedder degrades the ranking instead of failing the caller.
    """

    def __init__(
        self,
        embedder: Optional[EmbedderProtocol] = None,
        query_prefix: str = "",
        passage_prefix: str = "",
        max_chars: int = 3000,
        strategies: list[RerankStrategy] | None = None,
    ):
        """Initialize reranker.

        Args:
            embedder: Embedding service. None forces fallback ranking.
            query_prefix: Prefix added to the query before embedding.
            passage_prefix: Prefix added to each passage before embedding.
            max_chars: Passage truncation for rerank_documents.
            strategies: Custom strategy chain (fallback is always appended).
        """
        self._max_chars = max_chars

        if strategies is None:
            strategies = []
            if embedder is not None:
                strategies.append(
                    EmbeddingRerankStrategy(embedder, query_prefix, passage_prefix)
                )
        if not any(isinstance(s, RankDecayStrategy) for s in strategies):
            strategies = [*strategies, RankDecayStrategy()]
        self._strategies = strategies

    def rerank(self, query: str, documents: list[str]) -> RerankResponse:
        """Rank documents against query, best first.

        Args:
            query: User query.
            documents: Candidate texts.

        Returns:
            Rerank response; model is "fallback" in degraded mode.
        """
        start = time.perf_counter()

        if not documents:
            return RerankResponse(results=[], model="local")

        logger.info(f"Local reranking {len(documents)} documents")
        response = rerank_with_strategies(self._strategies, query, documents)
        response.elapsed_ms = (time.perf_counter() - start) * 1000

        if response.is_fallback:
            logger.warning("Local reranking degraded to input order")
        else:
            logger.info(f"Local reranking completed in {response.elapsed_ms:.0f}ms")

        return response

    def rerank_documents(self, query: str, documents: list[Document]) -> list[Document]:
        """Reorder documents and attach rerank_score.

        Returns new Document objects; the inputs are left untouched.
        """
        if not documents:
            return documents

        contents = [d.content[: self._max_chars] for d in documents]
        response = self.rerank(query, contents)

        return [
            replace(documents[r.index], rerank_score=r.relevance_score)
            for r in response.results
        ]
