"""Ingest service - vault reading, chunking and vector indexing."""

import hashlib
import logging
import re
from pathlib import Path
from typing import Optional

from ..exceptions import IndexUnavailableError
from ..models.document import NoteChunk
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol
from ..strategies.exclusion import is_path_excluded

logger = logging.getLogger(__name__)


class IngestService:
    """Service for reading vault notes and indexing them into the vector store."""

    def __init__(
        self,
        vault_path: str = "./vault",
        embedder: Optional[EmbedderProtocol] = None,
        vector_store: Optional[VectorStoreProtocol] = None,
        excluded_paths: list[str] | None = None,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        batch_size: int = 50,
        passage_prefix: str = "passage: ",
    ):
        """Initialize ingest service.

        Args:
            vault_path: Root folder of the notes.
            embedder: Embedding service (needed by run()).
            vector_store: Vector store (needed by run()).
            excluded_paths: Exclusion patterns; matching notes are skipped.
            chunk_size: Target chunk size in characters.
            chunk_overlap: Characters carried over from the previous chunk.
            batch_size: Batch size for indexing.
            passage_prefix: Prefix added to chunks before embedding.
        """
        self._vault_path = Path(vault_path)
        self._embedder = embedder
        self._vector_store = vector_store
        self._excluded_paths = list(excluded_paths or [])
        self._chunk_size = chunk_size
        self._chunk_overlap = min(chunk_overlap, chunk_size // 2)
        self._batch_size = batch_size
        self._passage_prefix = passage_prefix

        self._loader = None

    @property
    def loader(self):
        """Lazy load note loader."""
        if self._loader is None:
            from notesearch.infrastructure.document_loaders import MarkdownLoader

            self._loader = MarkdownLoader()
        return self._loader

    def _compute_hash(self, content: str) -> str:
        """Compute content hash."""
        return hashlib.md5(content.encode()).hexdigest()[:12]

    def _chunk_text(self, text: str) -> list[str]:
        """Split text into chunks preserving paragraphs and sentences.

        Args:
            text: Text to chunk.

        Returns:
            List of chunks.
        """
        paragraphs = re.split(r"\n\s*\n", text)
        chunks = []
        current_chunk = ""

        for para in paragraphs:
            para = para.strip()
            if not para:
                continue

            if len(current_chunk) + len(para) + 2 <= self._chunk_size:
                if current_chunk:
                    current_chunk += "\n\n" + para
                else:
                    current_chunk = para
            else:
                if current_chunk:
                    chunks.append(current_chunk)
                carry = self._overlap_tail(current_chunk)

                if len(para) > self._chunk_size:
                    sentences = re.split(r"(?<=[.!?])\s+", para)
                    current_chunk = carry
                    for sent in sentences:
                        if len(current_chunk) + len(sent) + 1 <= self._chunk_size:
                            current_chunk = (current_chunk + " " + sent).strip()
                        else:
                            if current_chunk and current_chunk != carry:
                                chunks.append(current_chunk)
                            current_chunk = sent
                else:
                    current_chunk = (carry + "\n\n" + para).strip() if carry else para

        if current_chunk:
            chunks.append(current_chunk)

        return chunks

    def _overlap_tail(self, chunk: str) -> str:
        """Last chunk_overlap characters, cut at a word boundary."""
        if not chunk or self._chunk_overlap <= 0:
            return ""
        tail = chunk[-self._chunk_overlap:]
        space = tail.find(" ")
        return tail[space + 1:] if 0 <= space < len(tail) - 1 else tail

    def _iter_note_files(self):
        for file_path in sorted(self._vault_path.rglob("*")):
            if not file_path.is_file() or not self.loader.supports(file_path):
                continue
            rel_path = file_path.relative_to(self._vault_path).as_posix()
            if is_path_excluded(rel_path, self._excluded_paths):
                logger.debug(f"Skip excluded: {rel_path}")
                continue
            yield file_path, rel_path

    def load_chunks(self) -> list[NoteChunk]:
        """Read and chunk every note in the vault.

        Returns:
            Chunks in path order.

        Raises:
            IndexUnavailableError: If the vault folder does not exist.
        """
        if not self._vault_path.is_dir():
            raise IndexUnavailableError(f"Vault path not found: {self._vault_path}")

        chunks: list[NoteChunk] = []
        for file_path, rel_path in self._iter_note_files():
            note = self.loader.load(file_path)
            if note is None or not note.content.strip():
                continue

            file_hash = self._compute_hash(note.content + "\n" + " ".join(note.tags))
            for i, chunk_text in enumerate(self._chunk_text(note.content)):
                chunks.append(
                    NoteChunk(
                        path=rel_path,
                        title=note.title,
                        content=chunk_text,
                        chunk_index=i,
                        file_hash=file_hash,
                        tags=list(note.tags),
                        mtime=note.mtime,
                        ctime=note.ctime,
                    )
                )

        logger.info(f"Loaded {len(chunks)} chunks from {self._vault_path}")
        return chunks

    def read_note(self, rel_path: str) -> Optional[str]:
        """Full text of one note, or None if it does not exist or is excluded."""
        if is_path_excluded(rel_path, self._excluded_paths):
            return None

        file_path = (self._vault_path / rel_path).resolve()
        try:
            file_path.relative_to(self._vault_path.resolve())
        except ValueError:
            logger.warning(f"Refusing to read outside the vault: {rel_path}")
            return None

        if not file_path.is_file() or not self.loader.supports(file_path):
            return None

        note = self.loader.load(file_path)
        return note.content if note is not None else None

    def run(self, force: bool = False) -> int:
        """Index vault notes into the vector store.

        Chunks are keyed by ``path#index``. A note whose hash changed, or
        that left the vault, has its old chunks deleted before new ones
        are written.

        Args:
            force: Force re-indexing of all notes.

        Returns:
            Number of chunks written.
        """
        if self._embedder is None or self._vector_store is None:
            raise IndexUnavailableError("Vector indexing requires an embedder and a vector store")

        indexed_hashes: dict[str, str] = {}
        for meta in self._vector_store.get_all_metadatas():
            if meta and "path" in meta:
                indexed_hashes[meta["path"]] = meta.get("file_hash", "")

        chunks_by_path: dict[str, list[NoteChunk]] = {}
        for chunk in self.load_chunks():
            chunks_by_path.setdefault(chunk.path, []).append(chunk)

        changed = [
            path
            for path, note_chunks in chunks_by_path.items()
            if force or indexed_hashes.get(path) != note_chunks[0].file_hash
        ]
        removed = [path for path in indexed_hashes if path not in chunks_by_path]

        stale = removed + [path for path in changed if path in indexed_hashes]
        if stale:
            self._vector_store.delete_paths(stale)
            logger.info(f"Removed stale chunks for {len(stale)} notes")

        all_chunks = [c for path in changed for c in chunks_by_path[path]]
        if not all_chunks:
            logger.info("No new notes to index")
            return 0

        total_indexed = 0
        for i in range(0, len(all_chunks), self._batch_size):
            batch = all_chunks[i : i + self._batch_size]

            ids = [c.chunk_id for c in batch]
            documents = [c.content for c in batch]
            metadatas = [
                {
                    "path": c.path,
                    "title": c.title,
                    "chunk_id": c.chunk_id,
                    "chunk_index": c.chunk_index,
                    "file_hash": c.file_hash,
                    "tags": " ".join(c.tags),
                    "mtime": c.mtime or 0,
                    "ctime": c.ctime or 0,
                }
                for c in batch
            ]

            texts_with_prefix = [f"{self._passage_prefix}{c.content}" for c in batch]
            embeddings = self._embedder.encode(texts_with_prefix).tolist()

            self._vector_store.upsert(
                ids=ids, embeddings=embeddings, documents=documents, metadatas=metadatas
            )

            total_indexed += len(batch)
            logger.info(f"Indexed batch: {total_indexed}/{len(all_chunks)}")

        logger.info(f"Indexing complete: {total_indexed} chunks from {len(changed)} notes")
        return total_indexed
