# src/dia_maestro/tasks/task_registry.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date
from typing import Any

from ..config import DEFAULT_TASKS_KEY
from ..core.models import Task, records_from_dicts
from ..storage.record_store import RecordStore

logger = logging.getLogger(__name__)

# Fields edit_task() may change; id and order are managed by the registry.
EDITABLE_FIELDS = frozenset({"name", "tags", "completed", "assigned_to_id", "due_date"})


def new_id() -> str:
    return str(uuid.uuid4())


def _due_date_text(due_date: date | str | None) -> str | None:
    if due_date is None:
        return None
    if isinstance(due_date, date):
        return due_date.isoformat()
    return due_date or None


class TaskRegistry:
    """
    In-memory task collection mirrored into a RecordStore.

    The list is kept in storage order, which may differ from the `order`
    field; use sorted_tasks() for display. Every successful mutation saves
    the full collection exactly once; lookups of unknown ids are no-ops.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        key: str = DEFAULT_TASKS_KEY,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._store = store
        self._key = key
        self._new_id = id_factory
        self._tasks: list[Task] = records_from_dicts(store.load(key), Task)
        logger.info("TaskRegistry ready key=%s total=%d", key, len(self._tasks))

    # ---- queries ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def sorted_tasks(self) -> list[Task]:
        return sorted(self._tasks, key=lambda t: t.order)

    def get(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _index_of(self, task_id: str) -> int:
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                return idx
        return -1

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- persistence ----

    def _persist(self) -> bool:
        return self._store.save(self._key, (t.to_dict() for t in self._tasks))

    # ---- mutations ----

    def add_task(
        self,
        name: str,
        tags: Iterable[str],
        assigned_to_id: str | None = None,
        due_date: date | str | None = None,
    ) -> Task:
        order = max((t.order for t in self._tasks), default=-1) + 1
        task = Task(
            id=self._new_id(),
            name=name,
            tags=list(tags),
            completed=False,
            order=order,
            assigned_to_id=assigned_to_id or None,
            due_date=_due_date_text(due_date),
        )
        self._tasks.append(task)
        logger.debug("Task added id=%s order=%d", task.id, task.order)
        self._persist()
        return task

    def toggle_complete(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        if idx == -1:
            return None
        task = replace(self._tasks[idx], completed=not self._tasks[idx].completed)
        self._tasks[idx] = task
        self._persist()
        return task

    def edit_task(self, task_id: str, **changes: Any) -> Task | None:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"edit_task() got unsupported fields: {', '.join(sorted(unknown))}")

        idx = self._index_of(task_id)
        if idx == -1:
            return None

        if "tags" in changes:
            changes["tags"] = list(changes["tags"] or [])
        if "due_date" in changes:
            changes["due_date"] = _due_date_text(changes["due_date"])
        if "assigned_to_id" in changes:
            changes["assigned_to_id"] = changes["assigned_to_id"] or None

        task = replace(self._tasks[idx], **changes)
        self._tasks[idx] = task
        self._persist()
        return task

    def delete_task(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx == -1:
            return False
        del self._tasks[idx]
        self._persist()
        return True

    def reorder(self, dragged_id: str, target_id: str) -> bool:
        """
        Move `dragged_id` to the position of `target_id`.

        Indices are taken from the storage sequence as held in memory, not
        from the `order` field. After the move every task's `order` is
        renumbered to its 0-based position.
        """
        if dragged_id == target_id:
            return False

        dragged_idx = self._index_of(dragged_id)
        target_idx = self._index_of(target_id)
        if dragged_idx == -1 or target_idx == -1:
            return False

        tasks = list(self._tasks)
        dragged = tasks.pop(dragged_idx)
        insert_at = target_idx - 1 if dragged_idx < target_idx else target_idx
        tasks.insert(insert_at, dragged)

        self._tasks = [replace(t, order=i) for i, t in enumerate(tasks)]
        logger.debug("Task reordered id=%s from=%d to=%d", dragged_id, dragged_idx, insert_at)
        self._persist()
        return True
