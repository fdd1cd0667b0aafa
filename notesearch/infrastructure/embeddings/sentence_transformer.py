import logging
from functools import cached_property

import numpy as np
from sentence_transformers import SentenceTransformer

from notesearch.core.exceptions import EmbeddingUnavailableError

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    def __init__(self, model_name: str = "intfloat/multilingual-e5-base"):
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        try:
            return SentenceTransformer(self._model_name)
        except Exception as e:
            raise EmbeddingUnavailableError(
                f"Failed to load embedding model '{self._model_name}': {e}"
            ) from e

    def warmup(self) -> None:
        _ = self.model
        logger.info("Embedding model warmed up")

    def encode(self, texts: str | list[str]) -> np.ndarray:
        model = self.model
        try:
            return model.encode(texts, convert_to_numpy=True)
        except Exception as e:
            raise EmbeddingUnavailableError(f"Embedding failed: {e}") from e
