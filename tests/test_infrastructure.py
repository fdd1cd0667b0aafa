"""Tests for the Chroma store, LLM client, CLI parser and container wiring."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests

from notesearch.config.settings import Settings
from notesearch.container import configure_container, container
from notesearch.core.exceptions import IndexUnavailableError
from notesearch.core.models.chat import ChatMessage
from notesearch.core.models.document import TimeRange
from notesearch.infrastructure.llm.openai_client import OpenAIChatClient
from notesearch.infrastructure.vector_stores.chroma_store import ChromaVectorStore
from notesearch.presentation.cli import build_parser
from notesearch.presentation.tools import ToolRegistry


def response(status: int = 200, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


class TestChromaVectorStore:
    """Tests for ChromaVectorStore."""

    @pytest.fixture
    def store(self) -> ChromaVectorStore:
        store = ChromaVectorStore(host="chroma", port=8000)
        store._collection_id = "col-1"
        return store

    def test_query_maps_documents(self, store) -> None:
        payload = {
            "ids": [["x"]],
            "documents": [["chunk text"]],
            "distances": [[0.25]],
            "metadatas": [[{"path": "a.md", "title": "a", "chunk_id": "a.md#0", "tags": "#x #y", "mtime": 5}]],
        }
        with patch("requests.request", return_value=response(200, payload)) as request:
            docs = store.query([0.1, 0.2], n_results=3, time_range=TimeRange(1, 10))

        body = request.call_args.kwargs["json"]
        assert body["n_results"] == 3
        assert body["where"] == {"$and": [{"mtime": {"$gte": 1}}, {"mtime": {"$lt": 10}}]}
        assert docs[0].score == pytest.approx(0.75)
        assert docs[0].tags == ["#x", "#y"]
        assert docs[0].chunk_id == "a.md#0"

    def test_query_without_results(self, store) -> None:
        with patch("requests.request", return_value=response(200, {"ids": [[]]})):
            assert store.query([0.1]) == []

    def test_upsert_posts_to_upsert_endpoint(self, store) -> None:
        with patch("requests.request", return_value=response(200, True)) as request:
            store.upsert(["a.md#0"], [[0.1]], ["text"], [{"path": "a.md"}])

        method, url = request.call_args.args
        assert method == "POST"
        assert url.endswith("/collections/col-1/upsert")
        assert request.call_args.kwargs["json"]["ids"] == ["a.md#0"]

    def test_delete_paths_filters_by_path(self, store) -> None:
        with patch("requests.request", return_value=response(200, None)) as request:
            store.delete_paths(["a.md", "b.md"])

        assert request.call_args.args[1].endswith("/collections/col-1/delete")
        assert request.call_args.kwargs["json"] == {"where": {"path": {"$in": ["a.md", "b.md"]}}}

    def test_connection_error_is_index_unavailable(self, store) -> None:
        with patch("requests.request", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(IndexUnavailableError, match="unreachable"):
                store.query([0.1])

    def test_http_error_is_index_unavailable(self, store) -> None:
        with patch("requests.request", return_value=response(500)):
            with pytest.raises(IndexUnavailableError, match="HTTP 500"):
                store.count()


class TestOpenAIChatClient:
    """Tests for OpenAIChatClient.condense_question."""

    def _client(self, answer: str) -> OpenAIChatClient:
        client = OpenAIChatClient(api_key="test")
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=answer))]
        )
        client._client = MagicMock()
        client._client.chat.completions.create = AsyncMock(return_value=completion)
        return client

    async def test_no_history_returns_question(self) -> None:
        client = self._client("ignored")

        assert await client.condense_question("what?", []) == "what?"
        client._client.chat.completions.create.assert_not_called()

    async def test_rewrites_with_history(self) -> None:
        client = self._client('"rust borrow checker errors"')
        history = [ChatMessage(role="user", content="I use rust")]

        result = await client.condense_question("why does it fail?", history)

        assert result == "rust borrow checker errors"
        messages = client._client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert messages[1] == {"role": "user", "content": "I use rust"}

    async def test_empty_answer_keeps_question(self) -> None:
        client = self._client("  ")
        history = [ChatMessage(role="user", content="x")]

        assert await client.condense_question("q", history) == "q"


class TestCliParser:
    """Tests for the CLI argument parser."""

    def test_search_arguments(self) -> None:
        args = build_parser().parse_args(
            ["search", "meeting notes", "--term", "#work", "--term", "budget", "--since-days", "7"]
        )

        assert args.query == "meeting notes"
        assert args.term == ["#work", "budget"]
        assert args.since_days == 7
        assert args.tier == "auto"

    def test_index_force(self) -> None:
        assert build_parser().parse_args(["index", "--force"]).force is True

    def test_rejects_unknown_tier(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["search", "q", "--tier", "fuzzy"])


class TestContainer:
    """Container wiring in lexical-only mode."""

    async def test_builds_tool_registry(self, vault: Path) -> None:
        container.reset()
        configure_container(
            Settings(vault_path=str(vault), enable_semantic_search=False, _env_file=None)
        )

        registry = container.resolve(ToolRegistry)

        assert registry.names() == [
            "localSearch",
            "lexicalSearch",
            "semanticSearch",
            "webSearch",
            "indexVault",
            "readNote",
        ]
        result = await registry.get("readNote").call({"notePath": "projects/alpha.md"})
        assert '"found": true' in result
        container.reset()
