"""Error taxonomy for retrieval, embedding and web search."""


class NoteSearchError(Exception):
    """Base error."""


class RetrievalError(NoteSearchError):
    """A retrieval tier could not produce results."""


class IndexUnavailableError(RetrievalError):
    """The lexical or vector index cannot answer.

    Distinct from an empty result: callers must report it instead of
    treating it as "no matches".
    """


class EmbeddingUnavailableError(NoteSearchError):
    """The embedding backend is missing or failed."""


class WebSearchError(NoteSearchError):
    """A web search provider failed."""


class WebSearchNotConfiguredError(WebSearchError):
    """Provider is missing an API key or base URL."""
