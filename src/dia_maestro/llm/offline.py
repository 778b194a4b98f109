# src/dia_maestro/llm/offline.py

from __future__ import annotations

from collections.abc import Iterable

from ..core.ports import ChatMessage


class OfflineLLMClient:
    """
    Offline deterministic LLM client used when no external API is configured.

    Suggestion prompts get an empty (but well-formed) suggestion list, so the
    task form keeps working without network access.
    """

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        yield '{"categorySuggestions": []}'
