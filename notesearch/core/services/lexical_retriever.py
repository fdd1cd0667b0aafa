"""Lexical retriever - keyword tier over the full-text index."""

import logging
from dataclasses import replace
from typing import Optional

from ...config.constants import TAG_MARKER
from ..models.document import Document
from ..models.retrieval import RetrievalTierKind, RetrieverOptions
from ..protocols.lexical_index import LexicalIndexProtocol
from ..strategies.scoring import max_normalize, sort_documents
from .query_planner import tag_matches

logger = logging.getLogger(__name__)


class LexicalRetriever:
    """BM25 tier with literal time and tag enumeration.

    Index errors are not caught: an unavailable index must stay
    distinguishable from an empty result.
    """

    kind = RetrievalTierKind.LEXICAL

    def __init__(self, index: LexicalIndexProtocol):
        """Initialize retriever.

        Args:
            index: Full-text index.
        """
        self._index = index

    def get_relevant_documents(
        self, query: str, options: RetrieverOptions
    ) -> list[Document]:
        """Retrieve documents for a query.

        Args:
            query: Raw query text.
            options: Planned retrieval options.

        Returns:
            Documents best first, at most options.max_k.
        """
        terms = self._query_terms(query, options)
        scored = self._index.search(terms)
        lexical_scores = max_normalize({d.identity: d.score for d in scored})

        candidates = self._enumerate(options)
        if candidates is None:
            candidates = scored

        results = []
        for doc in candidates:
            score = lexical_scores.get(doc.identity, 0.0)
            if score < options.min_similarity_score:
                continue
            results.append(
                replace(
                    doc,
                    score=score,
                    source=self.kind.value,
                    explanation=self._explain(doc, score, options),
                )
            )

        results = sort_documents(results)[: options.max_k]

        logger.info(
            f"Lexical search: {len(results)} docs for '{query[:50]}' "
            f"(scored={len(scored)}, max_k={options.max_k})"
        )
        return results

    def _query_terms(self, query: str, options: RetrieverOptions) -> list[str]:
        terms = [query, *options.plain_terms]
        terms.extend(t.lstrip(TAG_MARKER) for t in options.tag_terms)
        return [t for t in dict.fromkeys(terms) if t and t.strip()]

    def _enumerate(self, options: RetrieverOptions) -> Optional[list[Document]]:
        """Candidate set for enumeration queries, None for top-K queries."""
        if options.return_all and options.time_range is not None:
            candidates = self._index.find_in_range(options.time_range)
            if options.return_all_tags:
                candidates = [c for c in candidates if tag_matches(c.tags, options.tag_terms)]
            logger.info(f"Time range enumeration: {len(candidates)} candidates")
            return candidates

        if options.return_all_tags:
            candidates = self._index.find_by_tags(options.tag_terms)
            logger.info(f"Tag enumeration {options.tag_terms}: {len(candidates)} candidates")
            return candidates

        return None

    def _explain(self, doc: Document, score: float, options: RetrieverOptions) -> str:
        parts = [f"lexical={score:.3f}"]
        if options.return_all and options.time_range is not None:
            parts.append("in time range")
        if options.return_all_tags:
            matched = [t for t in options.tag_terms if tag_matches(doc.tags, [t])]
            if matched:
                parts.append(f"tags {', '.join(matched)}")
        return "; ".join(parts)
