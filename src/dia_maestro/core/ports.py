# src/dia_maestro/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The registries, the record store and the suggestion gateway depend on
Protocols instead of concrete implementations, so storage backends and LLM
providers stay swappable and tests can use in-memory fakes.
"""

from collections.abc import Iterable
from typing import Protocol

from .events import Notification

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...


class KeyValueStore(Protocol):
    """
    String-to-string persistent storage (the browser's localStorage shape).

    Implementations raise StorageError (or a subclass) on failure.
    """

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...
    def close(self) -> None: ...


class Notifier(Protocol):
    """Transient, non-blocking user notifications (toasts)."""

    def notify(self, notification: Notification) -> None: ...
