# tests/test_worker_registry.py

from __future__ import annotations

import json

from dia_maestro.core.models import Worker
from dia_maestro.storage.record_store import RecordStore
from dia_maestro.tasks.task_registry import TaskRegistry
from dia_maestro.workers.worker_registry import WorkerRegistry, find_assignee, group_by_department

WORKERS_KEY = "diaMaestroWorkers"
TASKS_KEY = "diaMaestroTasks"


def test_group_by_department_keeps_first_seen_order(records, seq_ids) -> None:
    reg = WorkerRegistry(records, key=WORKERS_KEY, id_factory=seq_ids)
    ana = reg.add_worker("Ana", "Sales")
    leo = reg.add_worker("Leo", "Sales")
    kim = reg.add_worker("Kim", "Ops")

    groups = group_by_department(reg.workers)

    assert groups == {"Sales": [ana, leo], "Ops": [kim]}
    assert list(groups) == ["Sales", "Ops"]


def test_add_worker_allows_duplicate_names(records, storage, seq_ids) -> None:
    reg = WorkerRegistry(records, key=WORKERS_KEY, id_factory=seq_ids)
    a = reg.add_worker("Ana", "Sales")
    b = reg.add_worker("Ana", "Sales")

    assert a.id != b.id
    assert len(reg) == 2
    assert json.loads(storage.get_item(WORKERS_KEY) or "") == [
        {"id": a.id, "name": "Ana", "department": "Sales"},
        {"id": b.id, "name": "Ana", "department": "Sales"},
    ]


def test_delete_worker_never_touches_tasks(records, storage, seq_ids) -> None:
    workers = WorkerRegistry(records, key=WORKERS_KEY, id_factory=seq_ids)
    tasks = TaskRegistry(records, key=TASKS_KEY, id_factory=seq_ids)

    ana = workers.add_worker("Ana", "Sales")
    task = tasks.add_task("Call client", ["sales"], assigned_to_id=ana.id)
    assert find_assignee(task, workers) == ana
    task_writes = storage.writes[TASKS_KEY]
    stored_tasks = storage.get_item(TASKS_KEY)

    assert workers.delete_worker(ana.id) is True

    assert tasks.get(task.id) == task
    assert tasks.get(task.id).assigned_to_id == ana.id
    assert storage.writes[TASKS_KEY] == task_writes
    assert storage.get_item(TASKS_KEY) == stored_tasks
    # dangling reference resolves to "not found", never an error
    assert find_assignee(task, workers) is None
    assert find_assignee(task, workers.workers) is None


def test_delete_unknown_worker_is_noop(records, storage, seq_ids) -> None:
    reg = WorkerRegistry(records, key=WORKERS_KEY, id_factory=seq_ids)
    reg.add_worker("Ana", "Sales")

    assert reg.delete_worker("missing") is False
    assert storage.writes[WORKERS_KEY] == 1


def test_find_assignee_for_unassigned_task(records, seq_ids) -> None:
    tasks = TaskRegistry(records, key=TASKS_KEY, id_factory=seq_ids)
    task = tasks.add_task("Solo", [])
    assert find_assignee(task, []) is None


def test_workers_and_tasks_use_distinct_keys(records, storage, seq_ids) -> None:
    WorkerRegistry(records, key=WORKERS_KEY, id_factory=seq_ids).add_worker("Kim", "Ops")
    assert TASKS_KEY not in storage.writes

    reloaded = WorkerRegistry(RecordStore(storage), key=WORKERS_KEY)
    assert [w.name for w in reloaded.workers] == ["Kim"]


def test_group_by_department_interleaved_sources() -> None:
    src = [Worker("1", "A", "Ops"), Worker("2", "B", "Sales"), Worker("3", "C", "Ops")]
    groups = group_by_department(src)

    assert list(groups) == ["Ops", "Sales"]
    assert [w.id for w in groups["Ops"]] == ["1", "3"]
    assert group_by_department([]) == {}
