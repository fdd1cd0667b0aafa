"""Document domain models."""
from dataclasses import dataclass, field
from typing import Any, Optional

from ...config.constants import DEFAULT_TITLE, FALLBACK_MODEL


@dataclass
class NoteChunk:
    """Note chunk for indexing."""
    path: str
    title: str
    content: str
    chunk_index: int
    file_hash: str
    tags: list[str] = field(default_factory=list)
    mtime: Optional[int] = None
    ctime: Optional[int] = None

    @property
    def chunk_id(self) -> str:
        return f"{self.path}#{self.chunk_index}"


@dataclass
class Document:
    """Scored unit of retrieved content."""
    content: str
    path: str = ""
    title: str = ""
    score: float = 0.0
    rerank_score: Optional[float] = None
    include_in_context: bool = True
    source: Optional[str] = None
    mtime: Optional[int] = None
    ctime: Optional[int] = None
    chunk_id: Optional[str] = None
    is_chunk: bool = False
    explanation: Optional[str] = None
    tags: list[str] = field(default_factory=list)

    @property
    def effective_score(self) -> float:
        """Ordering score (rerank if available, else tier score)."""
        return self.rerank_score if self.rerank_score is not None else self.score

    @property
    def dedup_key(self) -> str:
        """Logical identity: path, falling back to title."""
        return (self.path or self.title).lower()

    @property
    def identity(self) -> str:
        """Chunk-level identity used to join results across indexes."""
        return self.chunk_id or self.path or self.title

    def to_dict(self) -> dict[str, Any]:
        """Serialize for tool output.

        Both score fields carry the effective score so consumers that read
        either one see the same ordering value.
        """
        scored = self.effective_score
        return {
            "title": self.title or DEFAULT_TITLE,
            "content": self.content,
            "path": self.path or "",
            "score": scored,
            "rerank_score": scored,
            "includeInContext": self.include_in_context,
            "source": self.source,
            "mtime": self.mtime,
            "ctime": self.ctime,
            "chunkId": self.chunk_id,
            "isChunk": self.is_chunk,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class TimeRange:
    """Half-open range [start_ms, end_ms) in epoch milliseconds."""
    start_ms: int
    end_ms: int

    def contains(self, epoch_ms: Optional[int]) -> bool:
        if epoch_ms is None:
            return False
        return self.start_ms <= epoch_ms < self.end_ms


@dataclass
class RerankResult:
    """Relevance of one candidate, by position in the input list."""
    index: int
    relevance_score: float


@dataclass
class RerankResponse:
    """Ordered rerank results plus provenance."""
    results: list[RerankResult]
    model: str
    total_tokens: float = 0.0
    elapsed_ms: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.model == FALLBACK_MODEL
