"""Collapse documents that point at the same note."""

import logging

from ..models.document import Document
from .scoring import ScoringStrategy

logger = logging.getLogger(__name__)


def deduplicate_documents(documents: list[Document]) -> list[Document]:
    """Keep the best-scored document per dedup key.

    Output follows the order in which each key first appears; the document
    placed there is the one with the highest effective score (first wins
    on ties).

    Args:
        documents: Documents in tier order.

    Returns:
        One document per key.
    """
    order: list[str] = []
    best: dict[str, Document] = {}

    for doc in documents:
        key = doc.dedup_key
        existing = best.get(key)
        if existing is None:
            order.append(key)
            best[key] = doc
        elif doc.effective_score > existing.effective_score:
            best[key] = doc

    return [best[key] for key in order]


class DeduplicationStrategy(ScoringStrategy):
    """Strategy wrapper around deduplicate_documents."""

    def apply(self, query: str, results: list[Document]) -> list[Document]:
        deduped = deduplicate_documents(results)
        if len(deduped) < len(results):
            logger.info(f"Dedup: {len(results)} → {len(deduped)} documents")
        return deduped
