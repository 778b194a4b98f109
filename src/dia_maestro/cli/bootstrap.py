# src/dia_maestro/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires concrete implementations into AppState (storage/registries/LLM).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.events import NotificationCenter
from ..core.ports import KeyValueStore, LLMClient
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..profile.profile_store import ProfileStore
from ..storage.kv_store import SqliteKeyValueStore
from ..storage.record_store import RecordStore
from ..suggest.draft import DEFAULT_DEBOUNCE_SECONDS, TaskDraft
from ..suggest.gateway import TagSuggestionGateway
from ..tasks.task_registry import TaskRegistry
from ..workers.worker_registry import WorkerRegistry

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def build_llm_client(settings) -> LLMClient:
    try:
        return OpenRouterLLMClient(settings)
    except RuntimeError as e:
        # Fallback for local runs without an API key: suggestions stay empty.
        logger.info("Using offline LLM client: %s", e)
        return OfflineLLMClient()


def create_initial_state(
    *,
    settings=None,
    storage: KeyValueStore | None = None,
    llm: LLMClient | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings, storage and the LLM client injectable makes the app easy
    to test. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = SqliteKeyValueStore(settings.storage_path, quota_bytes=settings.storage_quota_bytes)

    if llm is None:
        llm = build_llm_client(settings)

    notifications = NotificationCenter()
    records = RecordStore(storage, notifications)

    return AppState(
        settings=settings,
        storage=storage,
        notifications=notifications,
        llm=llm,
        tasks=TaskRegistry(records, key=settings.tasks_key),
        workers=WorkerRegistry(records, key=settings.workers_key),
        profile=ProfileStore(records, key=settings.profile_key),
        suggestions=TagSuggestionGateway(llm, notifications, min_chars=settings.suggest_min_chars),
    )


def create_task_draft(state: AppState) -> TaskDraft:
    """New-task form state wired to the app's suggestion gateway (call inside a running loop)."""
    delay = float(getattr(state.settings, "suggest_debounce_seconds", DEFAULT_DEBOUNCE_SECONDS))
    return TaskDraft(state.suggestions, debounce_seconds=delay)
