# src/dia_maestro/workers/worker_registry.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable

from ..config import DEFAULT_WORKERS_KEY
from ..core.models import Task, Worker, records_from_dicts
from ..storage.record_store import RecordStore

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


class WorkerRegistry:
    """
    In-memory worker roster mirrored into a RecordStore.

    Deleting a worker never touches tasks: tasks keep their assigned_to_id,
    which then dangles and resolves to "no assignee" (see find_assignee).
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        key: str = DEFAULT_WORKERS_KEY,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._store = store
        self._key = key
        self._new_id = id_factory
        self._workers: list[Worker] = records_from_dicts(store.load(key), Worker)
        logger.info("WorkerRegistry ready key=%s total=%d", key, len(self._workers))

    @property
    def workers(self) -> list[Worker]:
        return list(self._workers)

    def get(self, worker_id: str | None) -> Worker | None:
        if not worker_id:
            return None
        for worker in self._workers:
            if worker.id == worker_id:
                return worker
        return None

    def __len__(self) -> int:
        return len(self._workers)

    def _persist(self) -> bool:
        return self._store.save(self._key, (w.to_dict() for w in self._workers))

    def add_worker(self, name: str, department: str) -> Worker:
        worker = Worker(id=self._new_id(), name=name, department=department)
        self._workers.append(worker)
        self._persist()
        return worker

    def delete_worker(self, worker_id: str) -> bool:
        for idx, worker in enumerate(self._workers):
            if worker.id == worker_id:
                del self._workers[idx]
                self._persist()
                return True
        return False


def group_by_department(workers: Iterable[Worker]) -> dict[str, list[Worker]]:
    """Departments in first-seen order; workers in source order within a group."""
    groups: dict[str, list[Worker]] = {}
    for worker in workers:
        groups.setdefault(worker.department, []).append(worker)
    return groups


def find_assignee(task: Task, workers: Iterable[Worker] | WorkerRegistry) -> Worker | None:
    """Resolve a task's assignee; absent or dangling references give None."""
    if not task.assigned_to_id:
        return None
    if isinstance(workers, WorkerRegistry):
        return workers.get(task.assigned_to_id)
    for worker in workers:
        if worker.id == task.assigned_to_id:
            return worker
    return None
