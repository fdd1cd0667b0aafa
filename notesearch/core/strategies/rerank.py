"""Rerank strategies, tried in order until one succeeds."""

import logging
from abc import ABC, abstractmethod

import numpy as np

from ...config.constants import FALLBACK_MODEL, FALLBACK_SCORE_STEP
from ..models.document import RerankResponse, RerankResult
from ..protocols.embedder import EmbedderProtocol

logger = logging.getLogger(__name__)


def cosine_similarity(vec_a: np.ndarray, vec_b: np.ndarray) -> float:
    """Cosine similarity of two vectors.

    Zero-magnitude vectors carry no signal and score 0.0.

    Raises:
        ValueError: If the vectors differ in length.
    """
    a = np.asarray(vec_a, dtype=np.float64).ravel()
    b = np.asarray(vec_b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        raise ValueError("Vectors must have the same length")

    magnitude = float(np.linalg.norm(a) * np.linalg.norm(b))
    if magnitude == 0.0:
        return 0.0

    return float(np.dot(a, b) / magnitude)


def to_relevance(similarity: float) -> float:
    """Map cosine [-1, 1] onto [0, 1]."""
    return min(1.0, max(0.0, (similarity + 1.0) / 2.0))


class RerankStrategy(ABC):
    """One way of ranking candidate texts against a query."""

    name: str = "strategy"

    @abstractmethod
    def rerank(self, query: str, documents: list[str]) -> RerankResponse:
        """Rank documents, best first.

        Raises:
            Exception: Any failure; the caller moves on to the next strategy.
        """
        ...


class EmbeddingRerankStrategy(RerankStrategy):
    """Rank by cosine similarity of query and document embeddings."""

    name = "embedding"

    def __init__(
        self,
        embedder: EmbedderProtocol,
        query_prefix: str = "",
        passage_prefix: str = "",
    ):
        """Initialize strategy.

        Args:
            embedder: Embedding service.
            query_prefix: Prefix for the query text (e.g. "query: ").
            passage_prefix: Prefix for candidate texts (e.g. "passage: ").
        """
        self._embedder = embedder
        self._query_prefix = query_prefix
        self._passage_prefix = passage_prefix

    def rerank(self, query: str, documents: list[str]) -> RerankResponse:
        query_embedding = np.asarray(self._embedder.encode(f"{self._query_prefix}{query}"))
        if query_embedding.ndim > 1:
            query_embedding = query_embedding[0]

        doc_embeddings = np.asarray(
            self._embedder.encode([f"{self._passage_prefix}{d}" for d in documents])
        )
        if len(doc_embeddings) != len(documents):
            raise ValueError(
                f"Embedder returned {len(doc_embeddings)} vectors for {len(documents)} documents"
            )

        scored = [
            RerankResult(
                index=i,
                relevance_score=to_relevance(cosine_similarity(query_embedding, emb)),
            )
            for i, emb in enumerate(doc_embeddings)
        ]
        # sorted() is stable, so ties keep ascending input index
        scored = sorted(scored, key=lambda r: r.relevance_score, reverse=True)

        return RerankResponse(
            results=scored,
            model=self._embedder.model_name or "local",
            total_tokens=sum(len(d) / 4 for d in documents),
        )


class RankDecayStrategy(RerankStrategy):
    """Keep input order with strictly decreasing synthetic scores."""

    name = FALLBACK_MODEL

    def __init__(self, step: float = FALLBACK_SCORE_STEP):
        self._step = step

    def rerank(self, query: str, documents: list[str]) -> RerankResponse:
        # Shrink the step for long lists so every score stays above zero
        step = min(self._step, 1.0 / max(len(documents), 1))
        return RerankResponse(
            results=[
                RerankResult(index=i, relevance_score=1.0 - i * step)
                for i in range(len(documents))
            ],
            model=FALLBACK_MODEL,
            total_tokens=0,
        )


def rerank_with_strategies(
    strategies: list[RerankStrategy], query: str, documents: list[str]
) -> RerankResponse:
    """Run strategies in order, returning the first successful response.

    Raises:
        RuntimeError: If every strategy failed.
    """
    errors = []
    for strategy in strategies:
        try:
            return strategy.rerank(query, documents)
        except Exception as e:
            logger.error(f"Rerank strategy '{strategy.name}' failed: {e}")
            errors.append(f"{strategy.name}: {e}")

    raise RuntimeError(f"All rerank strategies failed ({'; '.join(errors)})")
