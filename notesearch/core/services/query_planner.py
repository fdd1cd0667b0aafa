"""Query planner - derives retrieval options from query hints."""

import logging
from typing import Optional

from ...config.constants import (
    DEFAULT_MIN_SIMILARITY,
    RERANKER_THRESHOLD,
    RETURN_ALL_LIMIT,
    RETURN_ALL_MIN_SIMILARITY,
    SEMANTIC_RETURN_ALL_FLOOR,
    TAG_MARKER,
    TEXT_WEIGHT,
)
from ..models.document import TimeRange
from ..models.retrieval import RetrievalTierKind, RetrieverOptions

logger = logging.getLogger(__name__)


def extract_tag_terms(salient_terms: list[str]) -> list[str]:
    """Salient terms that start with the tag marker, hierarchy kept verbatim."""
    return [t for t in salient_terms if t.startswith(TAG_MARKER)]


class QueryPlanner:
    """Decide return-all policy and effective result cap.

    Time-scoped and tag-scoped queries are enumeration requests: they lift
    the cap to a return-all ceiling and drop the similarity floor.
    """

    def __init__(
        self,
        default_max_k: int = 15,
        return_all_limit: int = RETURN_ALL_LIMIT,
        semantic_return_all_floor: int = SEMANTIC_RETURN_ALL_FLOOR,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        text_weight: float = TEXT_WEIGHT,
        reranker_threshold: float = RERANKER_THRESHOLD,
    ):
        """Initialize planner.

        Args:
            default_max_k: Cap for ordinary relevance queries.
            return_all_limit: Ceiling for lexical enumeration queries.
            semantic_return_all_floor: Minimum cap for semantic time queries.
            min_similarity: Noise floor for relevance queries.
            text_weight: Lexical weight when blending with vectors.
            reranker_threshold: Best-score level below which to rerank.
        """
        self._default_max_k = default_max_k
        self._return_all_limit = return_all_limit
        self._semantic_floor = semantic_return_all_floor
        self._min_similarity = min_similarity
        self._text_weight = text_weight
        self._reranker_threshold = reranker_threshold

    def plan(
        self,
        salient_terms: list[str],
        time_range: Optional[TimeRange] = None,
        tier: RetrievalTierKind = RetrievalTierKind.LEXICAL,
    ) -> RetrieverOptions:
        """Build options for one retrieval call.

        Args:
            salient_terms: Keywords and tags extracted from the query.
            time_range: Optional time window.
            tier: Tier that will answer. The semantic tier has no tag
                enumeration and uses a softer return-all ceiling.

        Returns:
            Retriever options.
        """
        tag_terms = extract_tag_terms(salient_terms)
        return_all = time_range is not None

        if tier == RetrievalTierKind.SEMANTIC:
            return_all_tags = False
            ceiling = max(self._default_max_k, self._semantic_floor)
        else:
            return_all_tags = len(tag_terms) > 0
            ceiling = self._return_all_limit

        should_return_all = return_all or return_all_tags
        max_k = ceiling if should_return_all else self._default_max_k

        logger.info(
            f"{tier.value} search returnAll: {return_all} (tags returnAll: {return_all_tags})"
        )

        return RetrieverOptions(
            min_similarity_score=(
                RETURN_ALL_MIN_SIMILARITY if should_return_all else self._min_similarity
            ),
            max_k=max_k,
            salient_terms=list(salient_terms),
            tag_terms=tag_terms,
            time_range=time_range,
            text_weight=self._text_weight,
            return_all=return_all,
            return_all_tags=return_all_tags,
            use_reranker_threshold=self._reranker_threshold,
        )


def tag_matches(note_tags: list[str], tag_terms: list[str]) -> bool:
    """True if any note tag equals a tag term or descends from it.

    "#project" matches "#project" and "#project/x", not "#projects".
    """
    if not tag_terms:
        return False

    wanted = [t.lower().rstrip("/") for t in tag_terms]
    for tag in note_tags:
        tag = tag.lower()
        if not tag.startswith(TAG_MARKER):
            tag = TAG_MARKER + tag
        for term in wanted:
            if tag == term or tag.startswith(term + "/"):
                return True
    return False
