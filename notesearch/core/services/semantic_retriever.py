"""Semantic retriever - embedding tier blended with lexical signal."""

import logging
from dataclasses import replace
from typing import Optional

from ...config.constants import TAG_MARKER
from ..exceptions import EmbeddingUnavailableError, IndexUnavailableError
from ..models.document import Document
from ..models.retrieval import RetrievalTierKind, RetrieverOptions
from ..protocols.embedder import EmbedderProtocol
from ..protocols.lexical_index import LexicalIndexProtocol
from ..protocols.vector_store import VectorStoreProtocol
from ..strategies.scoring import MinScoreStrategy, max_normalize, sort_documents
from .local_reranker import LocalReranker
from .query_planner import tag_matches

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """Vector similarity tier with optional lexical blend and reranking."""

    kind = RetrievalTierKind.SEMANTIC

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        lexical_index: Optional[LexicalIndexProtocol] = None,
        reranker: Optional[LocalReranker] = None,
        query_prefix: str = "",
        fetch_k: int = 50,
    ):
        """Initialize retriever.

        Args:
            embedder: Embedding service.
            vector_store: Vector index.
            lexical_index: Source of the lexical signal for blending.
            reranker: Used when the best blended score is weak.
            query_prefix: Prefix added to the query before embedding.
            fetch_k: Minimum number of candidates fetched from the index.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._lexical_index = lexical_index
        self._reranker = reranker
        self._query_prefix = query_prefix
        self._fetch_k = fetch_k

    def get_relevant_documents(
        self, query: str, options: RetrieverOptions
    ) -> list[Document]:
        """Retrieve documents for a query.

        Args:
            query: Raw query text.
            options: Planned retrieval options.

        Returns:
            Documents best first, at most options.max_k.

        Raises:
            IndexUnavailableError: If embedding or the vector index fails.
        """
        try:
            query_embedding = self._embedder.encode(f"{self._query_prefix}{query}")
        except EmbeddingUnavailableError as e:
            raise IndexUnavailableError(f"Semantic search unavailable: {e}") from e

        if getattr(query_embedding, "ndim", 1) > 1:
            query_embedding = query_embedding[0]

        candidates = self._vector_store.query(
            query_embedding=[float(x) for x in query_embedding],
            n_results=max(options.max_k, self._fetch_k),
            time_range=options.time_range,
        )
        fetched = len(candidates)

        # Filter before blending so the blend only sees real candidates
        candidates = MinScoreStrategy(options.min_similarity_score).apply(query, candidates)
        if options.tag_terms:
            candidates = [c for c in candidates if tag_matches(c.tags, options.tag_terms)]

        if not candidates:
            logger.info(f"Semantic search: 0/{fetched} candidates for '{query[:50]}'")
            return []

        results = self._blend(query, candidates, options)

        best = max(r.score for r in results)
        if self._reranker is not None and best < options.use_reranker_threshold:
            logger.info(
                f"Best blended score {best:.2f} < {options.use_reranker_threshold}, reranking"
            )
            results = self._reranker.rerank_documents(query, results)

        results = sort_documents(results)[: options.max_k]

        logger.info(
            f"Semantic search: {len(results)} docs for '{query[:50]}' "
            f"(fetched={fetched}, max_k={options.max_k})"
        )
        return results

    def _blend(
        self, query: str, candidates: list[Document], options: RetrieverOptions
    ) -> list[Document]:
        """Combine vector and lexical scores linearly.

        Cosine scores are clipped to [0, 1]; BM25 scores are divided by the
        best candidate score so both live on the same scale.
        """
        weight = options.text_weight
        vector_scores = {c.identity: c.score for c in candidates}
        semantic = {key: min(1.0, max(0.0, s)) for key, s in vector_scores.items()}

        lexical_raw = self._lexical_scores(query, options) if weight > 0 else None
        if lexical_raw is None:
            weight = 0.0
            lexical = {}
        else:
            lexical = max_normalize(
                {key: lexical_raw.get(key, 0.0) for key in vector_scores}
            )

        blended = []
        for c in candidates:
            key = c.identity
            sem = semantic[key]
            lex = lexical.get(key, 0.0)
            score = (1.0 - weight) * sem + weight * lex
            blended.append(
                replace(
                    c,
                    score=score,
                    source=self.kind.value,
                    explanation=(
                        f"vector={vector_scores[key]:.3f}; semantic={sem:.3f}; "
                        f"lexical={lex:.3f}; weight={weight:.2f}"
                    ),
                )
            )
        return blended

    def _lexical_scores(
        self, query: str, options: RetrieverOptions
    ) -> Optional[dict[str, float]]:
        if self._lexical_index is None:
            return None

        terms = [query, *options.plain_terms]
        terms.extend(t.lstrip(TAG_MARKER) for t in options.tag_terms)
        try:
            scored = self._lexical_index.search([t for t in terms if t.strip()])
        except IndexUnavailableError as e:
            logger.warning(f"Lexical signal unavailable, using vectors only: {e}")
            return None

        return {d.identity: d.score for d in scored}
