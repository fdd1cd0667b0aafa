"""Lexical index protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.document import Document, TimeRange


@runtime_checkable
class LexicalIndexProtocol(Protocol):
    """Protocol for a keyword (BM25-style) full-text index.

    All methods raise IndexUnavailableError when the index cannot answer.
    Returned documents are fresh copies; callers may mutate them.
    """

    def search(self, terms: list[str], limit: Optional[int] = None) -> list[Document]:
        """Score chunks against terms, best first. Only positive scores."""
        ...

    def find_by_tags(self, tags: list[str]) -> list[Document]:
        """All chunks carrying any of the tags (or a descendant tag)."""
        ...

    def find_in_range(self, time_range: TimeRange) -> list[Document]:
        """All chunks whose note mtime falls inside the range."""
        ...

    def get_by_path(self, path: str) -> list[Document]:
        """All chunks of one note, in chunk order. Empty if unknown."""
        ...

    def refresh(self) -> int:
        """Rebuild the index. Returns the number of chunks indexed."""
        ...
