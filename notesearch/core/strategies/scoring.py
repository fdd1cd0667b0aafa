import logging
from abc import ABC, abstractmethod
from typing import Iterable

from ..models.document import Document

logger = logging.getLogger(__name__)


class ScoringStrategy(ABC):
    """Base class for post-retrieval strategies."""

    @abstractmethod
    def apply(self, query: str, results: list[Document]) -> list[Document]:
        """Apply strategy to results."""
        ...


class MinScoreStrategy(ScoringStrategy):
    """Drop results whose effective score is below a floor."""

    def __init__(self, min_score: float = 0.0):
        """Initialize strategy.

        Args:
            min_score: Inclusive lower bound.
        """
        self._min_score = min_score

    def apply(self, query: str, results: list[Document]) -> list[Document]:
        filtered = [r for r in results if r.effective_score >= self._min_score]

        if len(filtered) < len(results):
            logger.info(
                f"Min score: {len(results)} → {len(filtered)} (min={self._min_score:.2f})"
            )

        return filtered


def sort_documents(documents: Iterable[Document]) -> list[Document]:
    """Sort by effective score desc, then newer mtime first.

    Stable: equal keys keep their input order. Missing mtime sorts last.
    """
    return sorted(
        documents,
        key=lambda d: (
            -d.effective_score,
            -(d.mtime if d.mtime is not None else float("-inf")),
        ),
    )


def max_normalize(scores: dict[str, float]) -> dict[str, float]:
    """Divide by the best score so the top result is 1.0."""
    if not scores:
        return {}

    high = max(scores.values())
    if high <= 0:
        return {key: 0.0 for key in scores}
    return {key: s / high for key, s in scores.items()}
