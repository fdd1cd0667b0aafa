"""Chat domain models."""
from dataclasses import dataclass


@dataclass
class ChatMessage:
    """Chat message."""
    role: str  # "user" | "assistant"
    content: str


def to_message_list(messages: list[ChatMessage]) -> list[dict]:
    """Convert to list of dicts for LLM."""
    return [{"role": m.role, "content": m.content} for m in messages]
