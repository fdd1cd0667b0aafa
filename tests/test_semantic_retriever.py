"""Tests for the semantic retrieval tier."""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from conftest import FakeEmbedder, FakeVectorStore, make_chunk, make_doc
from notesearch.core.exceptions import IndexUnavailableError
from notesearch.core.models.document import TimeRange
from notesearch.core.models.retrieval import RetrievalTierKind, RetrieverOptions
from notesearch.core.services.query_planner import QueryPlanner
from notesearch.core.services.semantic_retriever import SemanticRetriever
from notesearch.infrastructure.lexical import BM25LexicalIndex


def options(**overrides) -> RetrieverOptions:
    base = QueryPlanner(default_max_k=15).plan([], tier=RetrievalTierKind.SEMANTIC)
    return replace(base, **overrides)


@pytest.fixture
def store() -> FakeVectorStore:
    return FakeVectorStore(
        [
            make_doc("a.md", 0.92, content="vector databases", mtime=3_000),
            make_doc("b.md", 0.81, content="embedding models", mtime=2_000),
            make_doc("c.md", 0.40, content="garden tools", mtime=1_000),
            make_doc("d.md", 0.05, content="noise", mtime=500),
        ]
    )


class TestSemanticRetriever:
    """Tests for SemanticRetriever."""

    def test_vector_only_scores(self, embedder, store) -> None:
        retriever = SemanticRetriever(embedder, store)

        results = retriever.get_relevant_documents("vectors", options())

        assert [d.path for d in results] == ["a.md", "b.md", "c.md"]
        assert results[0].score == pytest.approx(0.92)
        assert results[0].source == "semantic"
        assert "weight=0.00" in results[0].explanation

    def test_min_similarity_filters_before_blend(self, embedder, store) -> None:
        results = SemanticRetriever(embedder, store).get_relevant_documents(
            "q", options(min_similarity_score=0.5)
        )

        assert [d.path for d in results] == ["a.md", "b.md"]

    def test_blends_lexical_signal(self, embedder, store) -> None:
        index = BM25LexicalIndex(
            lambda: [
                make_chunk("a.md", "vector databases"),
                make_chunk("b.md", "embedding models for garden planning"),
                make_chunk("c.md", "garden tools"),
                make_chunk("e.md", "unrelated"),
                make_chunk("f.md", "also unrelated"),
            ]
        )
        retriever = SemanticRetriever(embedder, store, lexical_index=index)

        results = retriever.get_relevant_documents("embedding", options())

        by_path = {d.path: d for d in results}
        # b: 0.6 * 0.81 + 0.4 * 1.0
        assert by_path["b.md"].score == pytest.approx(0.886)
        assert by_path["a.md"].score == pytest.approx(0.6 * 0.92)
        assert results[0].path == "b.md"

    def test_lexical_failure_degrades_to_vectors(self, embedder, store) -> None:
        index = MagicMock()
        index.search.side_effect = IndexUnavailableError("lexical down")

        results = SemanticRetriever(embedder, store, lexical_index=index).get_relevant_documents(
            "q", options()
        )

        assert results[0].score == pytest.approx(0.92)

    def test_reranks_weak_results(self, embedder) -> None:
        store = FakeVectorStore([make_doc("x.md", 0.3), make_doc("y.md", 0.2)])
        reranker = MagicMock()
        reranker.rerank_documents.side_effect = lambda q, docs: [
            replace(docs[1], rerank_score=0.9),
            replace(docs[0], rerank_score=0.4),
        ]

        results = SemanticRetriever(embedder, store, reranker=reranker).get_relevant_documents(
            "q", options()
        )

        reranker.rerank_documents.assert_called_once()
        assert [d.path for d in results] == ["y.md", "x.md"]
        assert results[0].effective_score == pytest.approx(0.9)

    def test_skips_rerank_for_strong_results(self, embedder, store) -> None:
        reranker = MagicMock()

        SemanticRetriever(embedder, store, reranker=reranker).get_relevant_documents(
            "q", options()
        )

        reranker.rerank_documents.assert_not_called()

    def test_passes_time_range_and_fetch_size(self, embedder, store) -> None:
        time_range = TimeRange(1_500, 5_000)
        retriever = SemanticRetriever(embedder, store, fetch_k=50)

        results = retriever.get_relevant_documents(
            "q", options(time_range=time_range, max_k=200, min_similarity_score=0.0)
        )

        assert store.queries[-1]["n_results"] == 200
        assert store.queries[-1]["time_range"] == time_range
        assert [d.path for d in results] == ["a.md", "b.md"]

    def test_filters_by_tag_terms(self, embedder) -> None:
        store = FakeVectorStore(
            [make_doc("a.md", 0.9, tags=["#work"]), make_doc("b.md", 0.8, tags=["#home"])]
        )

        results = SemanticRetriever(embedder, store).get_relevant_documents(
            "q", options(tag_terms=["#work"], salient_terms=["#work"])
        )

        assert [d.path for d in results] == ["a.md"]

    def test_caps_at_max_k(self, embedder, store) -> None:
        results = SemanticRetriever(embedder, store).get_relevant_documents(
            "q", options(max_k=1)
        )

        assert [d.path for d in results] == ["a.md"]

    def test_query_prefix(self, store) -> None:
        embedder = FakeEmbedder()

        SemanticRetriever(embedder, store, query_prefix="query: ").get_relevant_documents(
            "hello", options()
        )

        assert embedder.calls == ["query: hello"]

    def test_embedding_failure_is_index_unavailable(self, store) -> None:
        retriever = SemanticRetriever(FakeEmbedder(fail=True), store)

        with pytest.raises(IndexUnavailableError, match="Semantic search unavailable"):
            retriever.get_relevant_documents("q", options())

    def test_vector_store_failure_propagates(self, embedder) -> None:
        store = MagicMock()
        store.query.side_effect = IndexUnavailableError("chroma down")

        with pytest.raises(IndexUnavailableError, match="chroma down"):
            SemanticRetriever(embedder, store).get_relevant_documents("q", options())
