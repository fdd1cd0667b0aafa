"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Optional

import numpy as np
import pytest

from notesearch.core.exceptions import EmbeddingUnavailableError
from notesearch.core.models.document import Document, NoteChunk, TimeRange
from notesearch.infrastructure.lexical import BM25LexicalIndex

PREFIXES = ("query: ", "passage: ")


class FakeEmbedder:
    """Embedder that looks texts up in a fixed table.

    Known prefixes are stripped before lookup; unknown texts get the
    default vector.
    """

    def __init__(
        self,
        vectors: Optional[dict[str, list[float]]] = None,
        default: Optional[list[float]] = None,
        fail: bool = False,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default or [0.0, 0.0, 1.0]
        self.fail = fail
        self.calls: list[str | list[str]] = []

    @property
    def model_name(self) -> str:
        return "fake-embedder"

    def warmup(self) -> None:
        pass

    def _vector(self, text: str) -> list[float]:
        for prefix in PREFIXES:
            if text.startswith(prefix):
                text = text[len(prefix):]
        return self.vectors.get(text, self.default)

    def encode(self, texts: str | list[str]) -> np.ndarray:
        self.calls.append(texts)
        if self.fail:
            raise EmbeddingUnavailableError("model not loaded")
        if isinstance(texts, str):
            return np.array(self._vector(texts), dtype=np.float32)
        return np.array([self._vector(t) for t in texts], dtype=np.float32)


class FakeVectorStore:
    """In-memory vector store returning preset documents."""

    def __init__(self, documents: Optional[list[Document]] = None) -> None:
        self.documents = list(documents or [])
        self.items: dict[str, dict] = {}
        self.queries: list[dict] = []

    def upsert(self, ids, embeddings, documents, metadatas) -> None:
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate IDs in batch: {ids}")
        for i, chunk_id in enumerate(ids):
            self.items[chunk_id] = {
                "id": chunk_id,
                "embedding": embeddings[i],
                "document": documents[i],
                "metadata": metadatas[i],
            }

    def delete_paths(self, paths: list[str]) -> None:
        self.items = {
            key: item for key, item in self.items.items() if item["metadata"]["path"] not in paths
        }

    def documents_for(self, path: str) -> list[str]:
        return [item["document"] for item in self.items.values() if item["metadata"]["path"] == path]

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        time_range: Optional[TimeRange] = None,
    ) -> list[Document]:
        self.queries.append(
            {"embedding": query_embedding, "n_results": n_results, "time_range": time_range}
        )
        docs = self.documents
        if time_range is not None:
            docs = [d for d in docs if time_range.contains(d.mtime)]
        docs = sorted(docs, key=lambda d: d.score, reverse=True)
        return docs[:n_results]

    def count(self) -> int:
        return len(self.items)

    def get_all_metadatas(self) -> list[dict]:
        return [item["metadata"] for item in self.items.values()]


def make_chunk(
    path: str,
    content: str,
    tags: Optional[list[str]] = None,
    mtime: Optional[int] = None,
    chunk_index: int = 0,
) -> NoteChunk:
    return NoteChunk(
        path=path,
        title=Path(path).stem,
        content=content,
        chunk_index=chunk_index,
        file_hash=f"hash-{path}",
        tags=tags or [],
        mtime=mtime,
        ctime=mtime,
    )


def make_doc(
    path: str,
    score: float = 0.0,
    content: str = "",
    mtime: Optional[int] = None,
    tags: Optional[list[str]] = None,
    rerank_score: Optional[float] = None,
) -> Document:
    return Document(
        content=content or f"content of {path}",
        path=path,
        title=Path(path).stem if path else "",
        score=score,
        rerank_score=rerank_score,
        mtime=mtime,
        chunk_id=f"{path}#0" if path else None,
        is_chunk=True,
        tags=tags or [],
    )


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def chunks() -> list[NoteChunk]:
    """Small vault: one note about python, others filler."""
    return [
        make_chunk("dev/python.md", "Python packaging with setuptools and wheels", ["#dev"], 1_000),
        make_chunk("dev/rust.md", "Rust ownership and borrowing rules", ["#dev"], 2_000),
        make_chunk("cooking/bread.md", "Sourdough bread needs a starter", ["#food"], 3_000),
        make_chunk("travel/japan.md", "Trains in Japan run on time", [], 4_000),
    ]


@pytest.fixture
def lexical_index(chunks) -> BM25LexicalIndex:
    return BM25LexicalIndex(lambda: chunks)


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Vault folder with a few markdown notes."""
    root = tmp_path / "vault"
    (root / "projects").mkdir(parents=True)
    (root / "journal").mkdir()
    (root / "projects" / "alpha.md").write_text(
        "---\ntags: [project, work]\n---\n# Alpha\n\nAlpha is the search rewrite. #project/alpha\n",
        encoding="utf-8",
    )
    (root / "projects" / "beta.md").write_text(
        "# Beta\n\nBeta tracks the reranker experiments.\n", encoding="utf-8"
    )
    (root / "journal" / "2024-01-01.md").write_text(
        "Private journal entry about the new year.\n", encoding="utf-8"
    )
    (root / "image.png").write_bytes(b"\x89PNG")
    return root
