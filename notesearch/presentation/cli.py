import argparse
import asyncio
import json
import logging
import sys
import time

from notesearch.config.settings import settings
from notesearch.container import configure_container, container
from notesearch.core.services.ingest_service import IngestService
from notesearch.presentation.tools import ToolRegistry, execute_tool_call

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


def _run_tool(name: str, args: dict) -> int:
    registry = container.resolve(ToolRegistry)
    result = asyncio.run(execute_tool_call({"name": name, "args": args}, registry))
    print(result.result)
    return 0 if result.success else 1


def cmd_index(args: argparse.Namespace) -> int:
    """Index command - build the vector index, or warm the lexical one."""
    if not settings.enable_semantic_search:
        return _run_tool("indexVault", {})

    count = container.resolve(IngestService).run(force=args.force)
    logger.info(f"Indexed {count} chunks")
    print(json.dumps({"success": True, "documentCount": count}))
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    tool_args: dict = {"query": args.query, "salientTerms": args.term or []}

    if args.since_days is not None:
        now_ms = int(time.time() * 1000)
        tool_args["timeRange"] = {
            "startTime": {"epoch": now_ms - args.since_days * DAY_MS},
            "endTime": {"epoch": now_ms},
        }

    tool_name = {
        "auto": "localSearch",
        "lexical": "lexicalSearch",
        "semantic": "semanticSearch",
    }[args.tier]
    return _run_tool(tool_name, tool_args)


def cmd_web(args: argparse.Namespace) -> int:
    return _run_tool("webSearch", {"query": args.query, "chatHistory": []})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notesearch", description="Search a notes vault and the web."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Index vault notes")
    index_parser.add_argument(
        "--force", action="store_true", help="Re-index notes that did not change"
    )
    index_parser.set_defaults(func=cmd_index)

    search_parser = subparsers.add_parser("search", help="Search vault notes")
    search_parser.add_argument("query")
    search_parser.add_argument(
        "--term",
        action="append",
        help="Salient term; repeat for several. Prefix with # for a tag.",
    )
    search_parser.add_argument(
        "--since-days", type=int, default=None, help="Only notes modified in the last N days"
    )
    search_parser.add_argument(
        "--tier", choices=["auto", "lexical", "semantic"], default="auto"
    )
    search_parser.set_defaults(func=cmd_search)

    web_parser = subparsers.add_parser("web", help="Search the web")
    web_parser.add_argument("query")
    web_parser.set_defaults(func=cmd_web)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=settings.log_level, format="%(message)s")
    configure_container(settings)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
