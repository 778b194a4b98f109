# src/dia_maestro/suggest/gateway.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from ..core.events import Notification, NotificationLevel
from ..core.ports import LLMClient, Notifier
from ..llm.client import friendly_llm_error_message

logger = logging.getLogger(__name__)

MIN_TASK_NAME_CHARS = 3

SUGGEST_SYSTEM_PROMPT = (
    "You are a tagging assistant for a personal task list.\n"
    "Reply with a single JSON object and nothing else, using exactly this shape:\n"
    '{"categorySuggestions": ["tag", "..."]}\n'
    "Tags are short (one to three words)."
)

SUGGEST_PROMPT_TEMPLATE = (
    'Suggest relevant categories for the task "{task_name}". '
    "Return the answer as an array of strings."
)


class SuggestionSchemaError(ValueError):
    """The LLM reply does not match {"categorySuggestions": [str, ...]}."""


def _extract_json_object(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("{") and raw.endswith("}"):
        return raw
    first = raw.find("{")
    last = raw.rfind("}")
    if first != -1 and last != -1 and last > first:
        return raw[first : last + 1]
    return raw


def parse_suggestions(raw: str) -> list[str]:
    """Parse an LLM reply into tag strings; raises on any mismatch."""
    data: Any = json.loads(_extract_json_object(raw))
    if not isinstance(data, dict):
        raise SuggestionSchemaError(f"expected a JSON object, got {type(data).__name__}")

    items = data.get("categorySuggestions")
    if not isinstance(items, list):
        raise SuggestionSchemaError("categorySuggestions is missing or not an array")
    if not all(isinstance(i, str) for i in items):
        raise SuggestionSchemaError("categorySuggestions must contain only strings")

    return [s.strip() for s in items if s.strip()]


class TagSuggestionGateway:
    """
    One outbound LLM call per task name.

    Purely advisory: every failure is logged, reported as one ERROR
    notification and turned into an empty list. Never raises.
    """

    def __init__(
        self,
        llm: LLMClient,
        notifier: Notifier | None = None,
        *,
        min_chars: int = MIN_TASK_NAME_CHARS,
    ) -> None:
        self._llm = llm
        self._notifier = notifier
        self._min_chars = min_chars

    @property
    def min_chars(self) -> int:
        return self._min_chars

    def suggest(self, task_name: str) -> list[str]:
        if len(task_name.strip()) < self._min_chars:
            return []

        prompt = SUGGEST_PROMPT_TEMPLATE.format(task_name=task_name)
        raw = ""
        try:
            for piece in self._llm.stream_chat([{"role": "user", "content": prompt}], SUGGEST_SYSTEM_PROMPT):
                raw += piece
        except Exception as e:
            logger.exception("Tag suggestion request failed for task_name=%r", task_name)
            self._report(friendly_llm_error_message(e))
            return []

        try:
            suggestions = parse_suggestions(raw)
        except ValueError:
            logger.exception("Unreadable tag suggestions for task_name=%r raw=%r", task_name, raw[:500])
            self._report("Could not read the AI reply. Try again.")
            return []

        logger.debug("Tag suggestions for %r: %s", task_name, suggestions)
        return suggestions

    def _report(self, description: str) -> None:
        if self._notifier is None:
            return
        self._notifier.notify(
            Notification(
                title="AI suggestion error",
                description=description,
                level=NotificationLevel.ERROR,
            )
        )


def parse_tags(text: str | None) -> list[str]:
    """Manually typed tags: comma separated, trimmed, empties dropped, no dedup."""
    if not text:
        return []
    return [t.strip() for t in text.split(",") if t.strip()]


def add_suggested_tag(draft_tags: Iterable[str], tag: str) -> list[str]:
    """Append `tag` unless an exact (case-sensitive) match is already present."""
    tags = list(draft_tags)
    if tag not in tags:
        tags.append(tag)
    return tags
