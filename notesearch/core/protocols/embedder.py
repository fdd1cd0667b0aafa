"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable
import numpy as np


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for embedding service."""

    @property
    def model_name(self) -> str:
        """Identifier of the underlying model."""
        ...

    def encode(self, texts: str | list[str]) -> np.ndarray:
        """Encode text(s) to embeddings.

        Args:
            texts: Single text or list of texts to encode.

        Returns:
            Numpy array of embeddings.

        Raises:
            EmbeddingUnavailableError: If the model cannot be loaded or fails.
        """
        ...

    def warmup(self) -> None:
        """Pre-load the model for faster inference."""
        ...
