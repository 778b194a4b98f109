# src/dia_maestro/storage/record_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..core.events import Notification, NotificationLevel
from ..core.ports import KeyValueStore, Notifier

logger = logging.getLogger(__name__)


class RecordStore:
    """
    JSON documents on top of a key-value store.

    Failures never propagate to the caller:
    - load: absent -> [], broken -> [] + one ERROR notification.
      The broken stored value is left untouched until the next save.
    - save: full replacement of the stored value; failure -> False + one
      ERROR notification. The caller keeps its in-memory state.
    """

    def __init__(self, storage: KeyValueStore, notifier: Notifier | None = None) -> None:
        self._storage = storage
        self._notifier = notifier

    def _report(self, title: str, description: str) -> None:
        if self._notifier is None:
            return
        self._notifier.notify(Notification(title=title, description=description, level=NotificationLevel.ERROR))

    def _read_json(self, key: str) -> Any | None:
        raw = self._storage.get_item(key)
        if raw is None:
            return None
        return json.loads(raw)

    # ---- collections ----

    def load(self, key: str) -> list[dict[str, Any]]:
        try:
            data = self._read_json(key)
            if data is None:
                return []
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        except Exception:
            logger.exception("Failed to load collection key=%s", key)
            self._report("Could not load data", "Stored data could not be read; starting with an empty list.")
            return []

        logger.debug("Loaded collection key=%s items=%d", key, len(data))
        return data

    def save(self, key: str, records: Iterable[Mapping[str, Any]]) -> bool:
        items = [dict(r) for r in records]
        try:
            payload = json.dumps(items, ensure_ascii=False)
            self._storage.set_item(key, payload)
        except Exception:
            logger.exception("Failed to save collection key=%s items=%d", key, len(items))
            self._report("Could not save data", "Your changes are kept for this session but were not saved.")
            return False

        logger.debug("Saved collection key=%s items=%d", key, len(items))
        return True

    # ---- single objects ----

    def load_object(self, key: str) -> dict[str, Any]:
        try:
            data = self._read_json(key)
            if data is None:
                return {}
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        except Exception:
            logger.exception("Failed to load object key=%s", key)
            self._report("Could not load data", "Stored data could not be read.")
            return {}
        return data

    def save_object(self, key: str, obj: Mapping[str, Any]) -> bool:
        try:
            self._storage.set_item(key, json.dumps(dict(obj), ensure_ascii=False))
        except Exception:
            logger.exception("Failed to save object key=%s", key)
            self._report("Could not save data", "Your changes were not saved.")
            return False
        return True
