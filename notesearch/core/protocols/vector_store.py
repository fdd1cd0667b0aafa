"""Vector store protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.document import Document, TimeRange


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for vector storage."""

    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict]
    ) -> None:
        """Insert chunks, replacing any stored under the same ID.

        Args:
            ids: Chunk IDs.
            embeddings: Chunk embeddings.
            documents: Chunk texts.
            metadatas: Chunk metadata.
        """
        ...

    def delete_paths(self, paths: list[str]) -> None:
        """Delete every chunk belonging to the given note paths."""
        ...

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        time_range: Optional[TimeRange] = None,
    ) -> list[Document]:
        """Search by embedding.

        Args:
            query_embedding: Query vector.
            n_results: Number of results to return.
            time_range: Restrict to chunks modified inside this range.

        Returns:
            Documents scored by cosine similarity, best first.

        Raises:
            IndexUnavailableError: If the store cannot answer.
        """
        ...

    def count(self) -> int:
        """Get chunk count."""
        ...

    def get_all_metadatas(self) -> list[dict]:
        """Get all chunk metadatas."""
        ...
