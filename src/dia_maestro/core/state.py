# src/dia_maestro/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..profile.profile_store import ProfileStore
from ..suggest.gateway import TagSuggestionGateway
from ..tasks.task_registry import TaskRegistry
from ..workers.worker_registry import WorkerRegistry
from .events import NotificationCenter
from .ports import KeyValueStore, LLMClient


@dataclass
class AppState:
    # Settings object (config.Settings in the app, SimpleNamespace in tests).
    settings: Any

    storage: KeyValueStore
    notifications: NotificationCenter
    llm: LLMClient

    tasks: TaskRegistry
    workers: WorkerRegistry
    profile: ProfileStore
    suggestions: TagSuggestionGateway
