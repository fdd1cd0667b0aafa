"""BM25 keyword index over vault chunks."""

import logging
import re
from typing import Callable, Optional

from rank_bm25 import BM25Okapi

from notesearch.core.exceptions import IndexUnavailableError
from notesearch.core.models.document import Document, NoteChunk, TimeRange
from notesearch.core.services.query_planner import tag_matches

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)

# Terms present in half the corpus get a zero IDF in BM25Okapi; keep such
# matches above non-matching chunks.
_MIN_MATCH_SCORE = 1e-6


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens."""
    return _TOKEN_RE.findall(text.lower())


class BM25LexicalIndex:
    """In-memory BM25 index, built on first use from a chunk loader."""

    def __init__(self, chunk_loader: Callable[[], list[NoteChunk]]):
        """Initialize index.

        Args:
            chunk_loader: Returns every chunk to index. May raise
                IndexUnavailableError (or OSError) when the vault is missing.
        """
        self._chunk_loader = chunk_loader
        self._chunks: Optional[list[NoteChunk]] = None
        self._token_sets: list[set[str]] = []
        self._bm25: Optional[BM25Okapi] = None

    def refresh(self) -> int:
        """Reload chunks and rebuild the BM25 model."""
        try:
            chunks = self._chunk_loader()
        except IndexUnavailableError:
            raise
        except OSError as e:
            raise IndexUnavailableError(f"Failed to read notes: {e}") from e

        corpus = [
            tokenize(" ".join([c.title, c.content, *(t.lstrip("#") for t in c.tags)]))
            for c in chunks
        ]
        self._token_sets = [set(tokens) for tokens in corpus]
        self._bm25 = BM25Okapi(corpus) if any(corpus) else None
        self._chunks = chunks

        logger.info(f"Built BM25 index over {len(chunks)} chunks")
        return len(chunks)

    def _ensure_built(self) -> list[NoteChunk]:
        if self._chunks is None:
            self.refresh()
        return self._chunks or []

    @staticmethod
    def _to_document(chunk: NoteChunk, score: float = 0.0) -> Document:
        return Document(
            content=chunk.content,
            path=chunk.path,
            title=chunk.title,
            score=score,
            mtime=chunk.mtime,
            ctime=chunk.ctime,
            chunk_id=chunk.chunk_id,
            is_chunk=True,
            tags=list(chunk.tags),
        )

    def search(self, terms: list[str], limit: Optional[int] = None) -> list[Document]:
        """Score chunks against terms.

        Args:
            terms: Query strings; each is tokenized.
            limit: Max results (None for all matches).

        Returns:
            Matching chunks, best first.
        """
        chunks = self._ensure_built()
        tokens = list(dict.fromkeys(t for term in terms for t in tokenize(term)))
        if not tokens or self._bm25 is None:
            return []

        scores = self._bm25.get_scores(tokens)
        wanted = set(tokens)

        matches = [
            (i, max(float(scores[i]), _MIN_MATCH_SCORE))
            for i in range(len(chunks))
            if self._token_sets[i] & wanted
        ]
        matches.sort(key=lambda m: m[1], reverse=True)
        if limit is not None:
            matches = matches[:limit]

        return [self._to_document(chunks[i], score) for i, score in matches]

    def find_by_tags(self, tags: list[str]) -> list[Document]:
        chunks = self._ensure_built()
        return [self._to_document(c) for c in chunks if tag_matches(c.tags, tags)]

    def find_in_range(self, time_range: TimeRange) -> list[Document]:
        chunks = self._ensure_built()
        return [self._to_document(c) for c in chunks if time_range.contains(c.mtime)]

    def get_by_path(self, path: str) -> list[Document]:
        chunks = self._ensure_built()
        wanted = path.strip().lower()
        return [self._to_document(c) for c in chunks if c.path.lower() == wanted]
