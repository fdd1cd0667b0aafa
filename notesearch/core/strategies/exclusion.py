"""Vault path exclusion."""

import logging
import re

from ..models.document import Document
from .scoring import ScoringStrategy

logger = logging.getLogger(__name__)

_SEPARATORS = ("/", "\\")


def _looks_like_regex(pattern: str) -> bool:
    return pattern.startswith("/") or "*" in pattern or "\\" in pattern


def _to_regex(pattern: str) -> str:
    """Turn a user pattern into a regex source.

    "/expr/" is taken as a raw regex; otherwise glob "*" becomes ".*".
    """
    if len(pattern) > 1 and pattern.startswith("/") and pattern.endswith("/"):
        return pattern[1:-1]
    return pattern.replace("*", ".*")


def _matches_literal(path: str, pattern: str) -> bool:
    """Exact file match or folder-prefix match."""
    base = pattern.rstrip("/\\")
    if not base:
        return False
    if path == pattern or path == base:
        return True
    return any(path.startswith(base + sep) for sep in _SEPARATORS)


def is_path_excluded(path: str, patterns: list[str] | None) -> bool:
    """Check whether a note path matches any exclusion pattern.

    Args:
        path: Vault-relative note path.
        patterns: Exact paths, folder prefixes, globs or /regex/ patterns.

    Returns:
        True if any pattern matches.
    """
    if not patterns:
        return False

    for pattern in patterns:
        if not pattern or not pattern.strip():
            continue

        if _looks_like_regex(pattern):
            try:
                if re.search(_to_regex(pattern), path):
                    return True
            except re.error as e:
                logger.debug(f"Invalid exclusion pattern '{pattern}', using literal match: {e}")

        if _matches_literal(path, pattern):
            return True

    return False


class ExclusionStrategy(ScoringStrategy):
    """Drop documents whose path matches an exclusion pattern."""

    def __init__(self, patterns: list[str] | None = None):
        self._patterns = list(patterns or [])

    def apply(self, query: str, results: list[Document]) -> list[Document]:
        if not self._patterns:
            return results

        kept = []
        for doc in results:
            if is_path_excluded(doc.path or "", self._patterns):
                logger.info(f"Excluding document from search results: {doc.path}")
                continue
            kept.append(doc)

        logger.info(f"After exclusion filtering: {len(kept)} documents remaining")
        return kept
