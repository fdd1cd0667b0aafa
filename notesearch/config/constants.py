"""Retrieval constants shared by planner, tiers and tools."""

# Ceiling used when a query is an enumeration request (time range or tags).
RETURN_ALL_LIMIT = 1000

# The semantic tier never returns fewer than this many docs in return-all mode.
SEMANTIC_RETURN_ALL_FLOOR = 200

# Weight of the lexical signal when blending with vector similarity.
TEXT_WEIGHT = 0.4

TAG_MARKER = "#"

DEFAULT_MIN_SIMILARITY = 0.1
RETURN_ALL_MIN_SIMILARITY = 0.0

RERANKER_THRESHOLD = 0.5

# Fallback rerank: 1.0, 0.99, 0.98, ...
FALLBACK_SCORE_STEP = 0.01
FALLBACK_MODEL = "fallback"

DEFAULT_TITLE = "Untitled"

LOCAL_SEARCH_TYPE = "local_search"
WEB_SEARCH_TYPE = "web_search"
READ_NOTE_TYPE = "read_note"
