"""Search tools exposed to the agent: vault, web, indexing, note lookup."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from notesearch.config.constants import (
    LOCAL_SEARCH_TYPE,
    READ_NOTE_TYPE,
    WEB_SEARCH_TYPE,
)
from notesearch.core.models.chat import ChatMessage
from notesearch.core.models.document import TimeRange
from notesearch.core.models.retrieval import RetrievalTierKind
from notesearch.core.protocols.lexical_index import LexicalIndexProtocol
from notesearch.core.protocols.llm import LLMProtocol
from notesearch.core.services.ingest_service import IngestService
from notesearch.core.services.merged_retriever import MergedRetriever
from notesearch.core.services.query_planner import QueryPlanner, extract_tag_terms
from notesearch.core.services.web_search_service import WebSearchService

from .base import Tool, create_tool

logger = logging.getLogger(__name__)

WEB_SEARCH_CITATION_INSTRUCTIONS = (
    "When using these web results, cite sources with footnote markers like [^1] "
    "matching the numbered results, and end your answer with a footnote list "
    "of the form [^1]: <url>. Only cite sources you actually used."
)


class TimeInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    epoch: int = Field(description="Epoch milliseconds")
    iso_date: Optional[str] = Field(default=None, alias="isoDate")


class TimeRangeArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_time: TimeInfo = Field(alias="startTime")
    end_time: TimeInfo = Field(alias="endTime")

    def to_time_range(self) -> TimeRange:
        return TimeRange(start_ms=self.start_time.epoch, end_ms=self.end_time.epoch)


class LocalSearchArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1, description="The search query")
    salient_terms: list[str] = Field(
        default_factory=list,
        alias="salientTerms",
        description="List of salient terms extracted from the query",
    )
    time_range: Optional[TimeRangeArgs] = Field(
        default=None, alias="timeRange", description="Time range for search"
    )


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class WebSearchArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1, description="The search query")
    chat_history: list[ChatTurn] = Field(
        default_factory=list, alias="chatHistory", description="Previous conversation turns"
    )


class ReadNoteArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_path: str = Field(min_length=1, alias="notePath", description="Vault-relative note path")


def _format_epoch(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).isoformat()


class SearchTools:
    """Builds the search tool set around injected services."""

    def __init__(
        self,
        retriever: MergedRetriever,
        planner: QueryPlanner,
        web_search: Optional[WebSearchService] = None,
        llm: Optional[LLMProtocol] = None,
        ingest: Optional[IngestService] = None,
        lexical_index: Optional[LexicalIndexProtocol] = None,
    ):
        """Initialize search tools.

        Args:
            retriever: Tier dispatcher with exclusion and dedup.
            planner: Query option builder.
            web_search: Web search service.
            llm: Rewrites follow-ups into standalone web queries.
            ingest: Vector indexing and note reading.
            lexical_index: Refreshed by indexVault in lexical-only mode.
        """
        self._retriever = retriever
        self._planner = planner
        self._web_search = web_search
        self._llm = llm
        self._ingest = ingest
        self._lexical_index = lexical_index

    async def _search(self, args: LocalSearchArgs, tier: RetrievalTierKind) -> str:
        time_range = args.time_range.to_time_range() if args.time_range else None

        if tier == RetrievalTierKind.AUTO:
            tier = self._retriever.choose_tier(
                has_time_range=time_range is not None,
                has_tag_terms=bool(extract_tag_terms(args.salient_terms)),
            )

        options = self._planner.plan(args.salient_terms, time_range, tier)
        documents = await asyncio.to_thread(
            self._retriever.get_relevant_documents, args.query, options, tier
        )

        if time_range is not None:
            logger.info(
                f"Time range search from {_format_epoch(time_range.start_ms)} "
                f"to {_format_epoch(time_range.end_ms)}"
            )

        return json.dumps(
            {"type": LOCAL_SEARCH_TYPE, "documents": [d.to_dict() for d in documents]},
            ensure_ascii=False,
        )

    async def local_search(self, args: LocalSearchArgs) -> str:
        """Dispatch to lexical or semantic search per the tier policy."""
        logger.info(
            "localSearch delegating to "
            f"{'semantic' if self._retriever.semantic_enabled else 'lexical'} search"
        )
        return await self._search(args, RetrievalTierKind.AUTO)

    async def lexical_search(self, args: LocalSearchArgs) -> str:
        return await self._search(args, RetrievalTierKind.LEXICAL)

    async def semantic_search(self, args: LocalSearchArgs) -> str:
        return await self._search(args, RetrievalTierKind.SEMANTIC)

    async def web_search(self, args: WebSearchArgs) -> str:
        """Search the web; every failure is reported inside the payload."""
        try:
            if self._web_search is None:
                raise RuntimeError("Web search is not available")

            question = args.query
            if self._llm is not None and args.chat_history:
                history = [ChatMessage(role=t.role, content=t.content) for t in args.chat_history]
                try:
                    question = await self._llm.condense_question(args.query, history)
                except Exception as e:
                    logger.warning(f"Question condensing failed, searching with the raw query: {e}")

            response = await self._web_search.search(question)

            if not response.results and response.answer:
                return json.dumps(
                    [
                        {
                            "type": WEB_SEARCH_TYPE,
                            "error": response.answer,
                            "content": response.answer,
                            "citations": [],
                        }
                    ],
                    ensure_ascii=False,
                )

            citations = [f"[{i}] {r.url}" for i, r in enumerate(response.results, 1)]

            web_content = f"{response.answer}\n\n" if response.answer else ""
            web_content += "\n\n".join(
                f"[{i}] **{r.title}**\n{r.snippet}" for i, r in enumerate(response.results, 1)
            )

            return json.dumps(
                [
                    {
                        "type": WEB_SEARCH_TYPE,
                        "content": web_content,
                        "citations": citations,
                        "instruction": WEB_SEARCH_CITATION_INSTRUCTIONS,
                    }
                ],
                ensure_ascii=False,
            )
        except Exception as e:
            logger.error(f"webSearch failed: {e}")
            message = str(e) or "Web search failed with unknown error"
            return json.dumps(
                [{"type": WEB_SEARCH_TYPE, "error": message, "content": message, "citations": []}],
                ensure_ascii=False,
            )

    async def index_vault(self) -> str:
        """Refresh whichever index the active tier depends on."""
        if self._retriever.semantic_enabled:
            try:
                if self._ingest is None:
                    raise RuntimeError("Vector indexing is not configured")
                count = await asyncio.to_thread(self._ingest.run)
            except Exception as e:
                logger.error(f"indexVault failed: {e}")
                return json.dumps(
                    {"success": False, "message": f"Failed to index with semantic search: {e}"}
                )

            return f"Semantic search index refreshed with {count} documents.\n" + json.dumps(
                {
                    "success": True,
                    "message": f"Semantic search index has been refreshed with {count} documents.",
                    "documentCount": count,
                }
            )

        if self._lexical_index is not None:
            try:
                await asyncio.to_thread(self._lexical_index.refresh)
            except Exception as e:
                logger.error(f"indexVault failed: {e}")
                return json.dumps({"success": False, "message": f"Failed to rebuild lexical index: {e}"})

        return (
            "The lexical retriever builds indexes on demand and doesn't require manual indexing.\n"
            + json.dumps(
                {
                    "success": True,
                    "message": "Lexical retriever uses on-demand indexing. No manual indexing required.",
                }
            )
        )

    async def read_note(self, args: ReadNoteArgs) -> str:
        """Targeted lookup; a missing note is a result, not an error."""
        path = args.note_path.strip()
        content = None
        if self._ingest is not None:
            content = await asyncio.to_thread(self._ingest.read_note, path)

        if content is None:
            logger.info(f"readNote: not found: {path}")
            return json.dumps(
                {
                    "type": READ_NOTE_TYPE,
                    "path": path,
                    "found": False,
                    "error": f"Note not found: {path}",
                },
                ensure_ascii=False,
            )

        return json.dumps(
            {
                "type": READ_NOTE_TYPE,
                "path": path,
                "found": True,
                "title": PurePosixPath(path).stem,
                "content": content,
            },
            ensure_ascii=False,
        )

    def build_tools(self) -> list[Tool]:
        return [
            create_tool(
                name="localSearch",
                description="Search for notes based on the time range and query",
                handler=self.local_search,
                schema=LocalSearchArgs,
                display_name="Vault Search",
            ),
            create_tool(
                name="lexicalSearch",
                description="Search for notes using lexical/keyword-based search",
                handler=self.lexical_search,
                schema=LocalSearchArgs,
            ),
            create_tool(
                name="semanticSearch",
                description="Search for notes using semantic/meaning-based search with embeddings",
                handler=self.semantic_search,
                schema=LocalSearchArgs,
            ),
            create_tool(
                name="webSearch",
                description="Search the web for information",
                handler=self.web_search,
                schema=WebSearchArgs,
                display_name="Web Search",
            ),
            create_tool(
                name="indexVault",
                description="Index the vault to the search index",
                handler=self.index_vault,
                is_background=True,
                category="indexing",
            ),
            create_tool(
                name="readNote",
                description="Read the full content of a note by its vault path",
                handler=self.read_note,
                schema=ReadNoteArgs,
                category="file",
            ),
        ]
