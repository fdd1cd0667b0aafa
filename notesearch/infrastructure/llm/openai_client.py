import logging

from openai import AsyncOpenAI

from notesearch.core.models.chat import ChatMessage, to_message_list

logger = logging.getLogger(__name__)

CONDENSE_SYSTEM_PROMPT = """Rewrite the user's latest question as a standalone search query.

Rules:
- Resolve pronouns and references using the conversation so far.
- Keep names, numbers and technical terms exactly as written.
- Keep the original language. Do not translate.
- Output ONLY the rewritten query, no quotes or explanation."""

CONDENSE_USER_PROMPT = """Latest question: {question}

Standalone query:"""


class OpenAIChatClient:
    """LLM client for any OpenAI-compatible API (OpenAI, Ollama, vLLM)."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434/v1",
        model: str = "qwen2.5:7b",
        api_key: str = "ollama",
        max_tokens: int = 256,
        temperature: float = 0.0,
        history_turns: int = 6,
    ):
        """Initialize client.

        Args:
            base_url: API URL.
            model: Model name.
            api_key: API key ("ollama" for a local Ollama server).
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
            history_turns: How many previous messages to send.
        """
        self._client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._history_turns = history_turns

    async def condense_question(
        self,
        question: str,
        history: list[ChatMessage],
    ) -> str:
        """Rewrite a follow-up question into a standalone one.

        Returns the question unchanged when there is no history or the
        model answers with an empty string.
        """
        if not history:
            return question

        messages = [{"role": "system", "content": CONDENSE_SYSTEM_PROMPT}]
        messages.extend(to_message_list(history[-self._history_turns:]))
        messages.append(
            {"role": "user", "content": CONDENSE_USER_PROMPT.format(question=question)}
        )

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        condensed = (response.choices[0].message.content or "").strip().strip('"')
        if not condensed:
            return question

        logger.info(f"[condense] '{question[:60]}' -> '{condensed[:60]}'")
        return condensed
