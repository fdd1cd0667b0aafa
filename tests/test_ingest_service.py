"""Tests for vault reading, chunking and indexing."""

from pathlib import Path

import pytest

from conftest import FakeEmbedder, FakeVectorStore
from notesearch.core.exceptions import IndexUnavailableError
from notesearch.core.services.ingest_service import IngestService


class TestChunking:
    """Tests for IngestService._chunk_text."""

    def test_short_text_is_one_chunk(self) -> None:
        service = IngestService()

        assert service._chunk_text("first\n\nsecond") == ["first\n\nsecond"]

    def test_splits_on_paragraphs(self) -> None:
        service = IngestService(chunk_size=50, chunk_overlap=0)
        paragraphs = ["A" * 30, "B" * 30, "C" * 30]

        assert service._chunk_text("\n\n".join(paragraphs)) == paragraphs

    def test_carries_overlap_into_next_chunk(self) -> None:
        service = IngestService(chunk_size=50, chunk_overlap=10)
        first = "one two three four five six seven"
        second = "eight nine ten eleven twelve"

        chunks = service._chunk_text(f"{first}\n\n{second}")

        assert chunks[0] == first
        assert chunks[1] == f"six seven\n\n{second}"

    def test_long_paragraph_splits_on_sentences(self) -> None:
        service = IngestService(chunk_size=60, chunk_overlap=0)
        sentences = [f"This is sentence number {i}." for i in range(1, 6)]

        chunks = service._chunk_text(" ".join(sentences))

        assert len(chunks) == 3
        assert all(len(c) <= 60 for c in chunks)
        assert " ".join(chunks) == " ".join(sentences)

    def test_blank_text(self) -> None:
        assert IngestService()._chunk_text("\n\n  \n\n") == []


class TestLoadChunks:
    """Tests for IngestService.load_chunks."""

    def test_loads_supported_notes(self, vault: Path) -> None:
        chunks = IngestService(str(vault)).load_chunks()

        assert [c.path for c in chunks] == [
            "journal/2024-01-01.md",
            "projects/alpha.md",
            "projects/beta.md",
        ]
        alpha = chunks[1]
        assert alpha.title == "alpha"
        assert alpha.chunk_id == "projects/alpha.md#0"
        assert "#project/alpha" in alpha.tags
        assert alpha.mtime is not None

    def test_skips_excluded_paths(self, vault: Path) -> None:
        chunks = IngestService(str(vault), excluded_paths=["journal"]).load_chunks()

        assert {c.path for c in chunks} == {"projects/alpha.md", "projects/beta.md"}

    def test_missing_vault(self, tmp_path: Path) -> None:
        with pytest.raises(IndexUnavailableError, match="Vault path not found"):
            IngestService(str(tmp_path / "nope")).load_chunks()


class TestReadNote:
    """Tests for IngestService.read_note."""

    def test_reads_note(self, vault: Path) -> None:
        content = IngestService(str(vault)).read_note("projects/beta.md")

        assert content is not None
        assert "reranker experiments" in content

    def test_missing_note(self, vault: Path) -> None:
        assert IngestService(str(vault)).read_note("projects/gamma.md") is None

    def test_unsupported_file(self, vault: Path) -> None:
        assert IngestService(str(vault)).read_note("image.png") is None

    def test_excluded_note(self, vault: Path) -> None:
        service = IngestService(str(vault), excluded_paths=["journal"])

        assert service.read_note("journal/2024-01-01.md") is None

    def test_refuses_paths_outside_vault(self, vault: Path) -> None:
        (vault.parent / "outside.md").write_text("secret", encoding="utf-8")

        assert IngestService(str(vault)).read_note("../outside.md") is None


class TestRun:
    """Tests for IngestService.run."""

    @pytest.fixture
    def store(self) -> FakeVectorStore:
        return FakeVectorStore()

    @pytest.fixture
    def service(self, vault: Path, store: FakeVectorStore) -> IngestService:
        return IngestService(
            str(vault),
            embedder=FakeEmbedder(),
            vector_store=store,
            batch_size=2,
            passage_prefix="passage: ",
        )

    def test_indexes_all_chunks(self, service: IngestService, store: FakeVectorStore) -> None:
        assert service.run() == 3

        assert set(store.items) == {
            "journal/2024-01-01.md#0",
            "projects/alpha.md#0",
            "projects/beta.md#0",
        }
        alpha = store.items["projects/alpha.md#0"]["metadata"]
        assert alpha["chunk_id"] == "projects/alpha.md#0"
        assert alpha["tags"] == "#project #work #project/alpha"
        assert alpha["title"] == "alpha"

    def test_prefixes_passages(self, service: IngestService) -> None:
        service.run()

        batches = [call for call in service._embedder.calls if isinstance(call, list)]
        assert len(batches) == 2
        assert all(text.startswith("passage: ") for batch in batches for text in batch)

    def test_skips_unchanged_notes(self, service: IngestService) -> None:
        service.run()

        assert service.run() == 0
        assert service.run(force=True) == 3

    def test_force_rewrites_stored_chunks(
        self, vault: Path, service: IngestService, store: FakeVectorStore
    ) -> None:
        service.run()
        store.items["projects/beta.md#0"]["document"] = "stale"

        service.run(force=True)

        assert len(store.items) == 3
        assert "reranker experiments" in store.documents_for("projects/beta.md")[0]

    def test_identical_notes_get_distinct_ids(
        self, vault: Path, service: IngestService, store: FakeVectorStore
    ) -> None:
        (vault / "daily").mkdir()
        (vault / "daily" / "mon.md").write_text("Daily template\n", encoding="utf-8")
        (vault / "daily" / "tue.md").write_text("Daily template\n", encoding="utf-8")

        assert service.run() == 5
        assert store.documents_for("daily/mon.md") == ["Daily template"]
        assert store.documents_for("daily/tue.md") == ["Daily template"]

    def test_copy_added_later_is_indexed(
        self, vault: Path, service: IngestService, store: FakeVectorStore
    ) -> None:
        service.run()
        beta = (vault / "projects" / "beta.md").read_text(encoding="utf-8")
        (vault / "projects" / "beta-copy.md").write_text(beta, encoding="utf-8")

        assert service.run() == 1
        assert "projects/beta-copy.md#0" in store.items
        assert "projects/beta.md#0" in store.items

    def test_edited_note_replaces_old_chunks(
        self, vault: Path, service: IngestService, store: FakeVectorStore
    ) -> None:
        note = vault / "projects" / "beta.md"
        note.write_text("Old text\n\n" + "filler sentence. " * 80, encoding="utf-8")
        service.run()
        assert len(store.documents_for("projects/beta.md")) > 1

        note.write_text("New text\n", encoding="utf-8")

        assert service.run() == 1
        assert store.documents_for("projects/beta.md") == ["New text"]

    def test_deleted_note_is_removed(
        self, vault: Path, service: IngestService, store: FakeVectorStore
    ) -> None:
        service.run()
        (vault / "projects" / "beta.md").unlink()

        assert service.run() == 0
        assert store.documents_for("projects/beta.md") == []
        assert len(store.items) == 2

    def test_tag_only_edit_reindexes(
        self, vault: Path, service: IngestService, store: FakeVectorStore
    ) -> None:
        service.run()
        note = vault / "projects" / "alpha.md"
        note.write_text(
            note.read_text(encoding="utf-8").replace("tags: [project, work]", "tags: [project]"),
            encoding="utf-8",
        )

        assert service.run() == 1
        assert store.items["projects/alpha.md#0"]["metadata"]["tags"] == "#project #project/alpha"

    def test_requires_embedder_and_store(self, vault: Path) -> None:
        with pytest.raises(IndexUnavailableError):
            IngestService(str(vault)).run()
