"""Retrieval tier protocol."""
from typing import Protocol, runtime_checkable

from ..models.document import Document
from ..models.retrieval import RetrievalTierKind, RetrieverOptions


@runtime_checkable
class RetrievalTier(Protocol):
    """One retrieval tier (lexical or semantic)."""

    kind: RetrievalTierKind

    def get_relevant_documents(
        self, query: str, options: RetrieverOptions
    ) -> list[Document]:
        """Retrieve documents for a query.

        Raises:
            IndexUnavailableError: If the backing index cannot answer.
        """
        ...
