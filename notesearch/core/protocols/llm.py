"""LLM protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.chat import ChatMessage


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for LLM client."""

    async def condense_question(
        self,
        question: str,
        history: list[ChatMessage],
    ) -> str:
        """Rewrite a follow-up question into a standalone one.

        Args:
            question: Latest user question.
            history: Previous conversation turns.

        Returns:
            Standalone question.
        """
        ...
