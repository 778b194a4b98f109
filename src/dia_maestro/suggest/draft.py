# src/dia_maestro/suggest/draft.py

from __future__ import annotations

import asyncio
import logging
from datetime import date

from ..core.models import Task
from ..tasks.task_registry import TaskRegistry
from .debounce import Debouncer
from .gateway import TagSuggestionGateway, add_suggested_tag, parse_tags

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class DraftValidationError(ValueError):
    pass


class TaskDraft:
    """
    State of the "new task" form.

    Name edits trigger a debounced suggestion fetch; the blocking gateway call
    runs in a worker thread and its result lands in `suggestions`. Only the
    newest fetch may write `suggestions`: a reply for a superseded name is
    dropped.

    Must be driven from inside a running event loop.
    """

    def __init__(
        self,
        gateway: TagSuggestionGateway,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._gateway = gateway
        self._debouncer = Debouncer(debounce_seconds, self._fetch_suggestions, loop=loop)
        self._generation = 0

        self.name = ""
        self.tags_text = ""
        self.assigned_to_id: str | None = None
        self.due_date: date | str | None = None

        self.suggestions: list[str] = []
        self.is_suggesting = False

    # ---- name / suggestions ----

    def set_name(self, name: str) -> None:
        self.name = name
        if name:
            self._debouncer(name)
        else:
            self._debouncer.cancel()
            self._generation += 1
            self.suggestions = []
            self.is_suggesting = False

    async def _fetch_suggestions(self, name: str) -> None:
        self._generation += 1
        generation = self._generation
        self.is_suggesting = True
        try:
            result = await asyncio.to_thread(self._gateway.suggest, name)
        finally:
            if generation == self._generation:
                self.is_suggesting = False

        if generation != self._generation:
            logger.debug("Dropping stale suggestions for %r", name)
            return
        self.suggestions = result

    async def wait_idle(self) -> None:
        """Wait until no suggestion timer or fetch is outstanding."""
        while self._debouncer.pending:
            await asyncio.sleep(self._debouncer.delay / 4 or 0.01)
        await self._debouncer.drain()

    # ---- tags ----

    @property
    def draft_tags(self) -> list[str]:
        return parse_tags(self.tags_text)

    def add_suggested_tag(self, tag: str) -> bool:
        current = self.draft_tags
        updated = add_suggested_tag(current, tag)
        if updated == current:
            return False
        self.tags_text = ", ".join(updated)
        return True

    # ---- submit ----

    def submit(self, registry: TaskRegistry) -> Task:
        if not self.name:
            raise DraftValidationError("Task name is required.")
        task = registry.add_task(self.name, self.draft_tags, self.assigned_to_id, self.due_date)
        self.reset()
        return task

    def reset(self) -> None:
        self._debouncer.cancel()
        self._generation += 1
        self.name = ""
        self.tags_text = ""
        self.assigned_to_id = None
        self.due_date = None
        self.suggestions = []
        self.is_suggesting = False
