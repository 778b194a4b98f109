# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace

import pytest

from dia_maestro.storage.record_store import RecordStore

from .fakes import CountingKeyValueStore, FakeLLMClient, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment / .env.
    """
    return SimpleNamespace(
        app_name="Dia Maestro",
        data_dir=tmp_path,
        storage_path=tmp_path / "storage.sqlite3",
        storage_quota_bytes=1024 * 1024,
        tasks_key="diaMaestroTasks",
        workers_key="diaMaestroWorkers",
        profile_key="diaMaestroProfile",
        llm_models=["test/model"],
        suggest_debounce_seconds=0.05,
        suggest_min_chars=3,
    )


@pytest.fixture()
def storage() -> CountingKeyValueStore:
    return CountingKeyValueStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def records(storage: CountingKeyValueStore, notifier: RecordingNotifier) -> RecordStore:
    return RecordStore(storage, notifier)


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def seq_ids() -> Callable[[], str]:
    """Predictable ids: t1, t2, ..."""
    counter = {"n": 0}

    def _next() -> str:
        counter["n"] += 1
        return f"t{counter['n']}"

    return _next
