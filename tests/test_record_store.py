# tests/test_record_store.py

from __future__ import annotations

import json

from dia_maestro.storage.kv_store import InMemoryKeyValueStore
from dia_maestro.storage.record_store import RecordStore
from dia_maestro.tasks.task_registry import TaskRegistry

from .fakes import CountingKeyValueStore, RecordingNotifier


def test_load_missing_key_is_empty_without_errors(records, notifier) -> None:
    assert records.load("diaMaestroTasks") == []
    assert notifier.notifications == []


def test_corrupted_tasks_load_empty_and_are_overwritten_on_next_save(notifier, seq_ids) -> None:
    storage = CountingKeyValueStore({"diaMaestroTasks": "{not json"})
    store = RecordStore(storage, notifier)

    registry = TaskRegistry(store, key="diaMaestroTasks", id_factory=seq_ids)
    assert registry.tasks == []
    assert len(notifier.errors) == 1
    # load() must not repair the stored value by itself
    assert storage.get_item("diaMaestroTasks") == "{not json"

    registry.add_task("Buy milk", ["errand"])

    stored = json.loads(storage.get_item("diaMaestroTasks") or "")
    assert [t["name"] for t in stored] == ["Buy milk"]
    assert len(notifier.errors) == 1


def test_non_array_document_is_a_load_failure(notifier) -> None:
    store = RecordStore(InMemoryKeyValueStore({"k": '{"id": "x"}'}), notifier)
    assert store.load("k") == []
    assert len(notifier.errors) == 1


def test_save_failure_reports_and_returns_false(notifier) -> None:
    storage = CountingKeyValueStore()
    storage.fail_writes = True
    store = RecordStore(storage, notifier)

    assert store.save("k", [{"id": "1"}]) is False
    assert len(notifier.errors) == 1
    assert storage.get_item("k") is None


def test_save_replaces_whole_collection(records, storage) -> None:
    records.save("k", [{"id": "1"}, {"id": "2"}])
    records.save("k", [{"id": "3"}])
    assert json.loads(storage.get_item("k") or "") == [{"id": "3"}]


def test_quota_exceeded_is_reported() -> None:
    notifier = RecordingNotifier()
    store = RecordStore(InMemoryKeyValueStore(quota_bytes=16), notifier)

    assert store.save("k", [{"name": "a fairly long task name"}]) is False
    assert len(notifier.errors) == 1


def test_objects_round_trip_and_bad_object_is_reported(notifier) -> None:
    store = RecordStore(InMemoryKeyValueStore({"bad": "[1, 2]"}), notifier)

    assert store.save_object("profile", {"name": "Ana"}) is True
    assert store.load_object("profile") == {"name": "Ana"}
    assert store.load_object("missing") == {}
    assert store.load_object("bad") == {}
    assert len(notifier.errors) == 1
