# src/dia_maestro/profile/profile_store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..config import DEFAULT_PROFILE_KEY
from ..core.events import EventHook
from ..core.models import ProfileData
from ..storage.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_INITIALS = "SA"


class ProfileStore:
    """
    Single-object profile document.

    Consumers that display profile data (header avatar, console status)
    subscribe() instead of listening on a global event bus.
    """

    def __init__(self, store: RecordStore, *, key: str = DEFAULT_PROFILE_KEY) -> None:
        self._store = store
        self._key = key
        self.updated: EventHook[ProfileData] = EventHook()

    def load(self) -> ProfileData:
        return ProfileData.from_dict(self._store.load_object(self._key))

    def save(self, changes: ProfileData | dict[str, Any]) -> ProfileData:
        """
        Merge `changes` over the stored profile and write it back.

        None fields in `changes` leave the stored value as is; an empty string
        overwrites it. Subscribers are notified only when the write succeeded.
        """
        if isinstance(changes, ProfileData):
            patch = changes.to_dict()
        else:
            patch = ProfileData.from_dict(changes).to_dict()

        current = self._store.load_object(self._key)
        merged = ProfileData.from_dict({**current, **patch})

        if self._store.save_object(self._key, merged.to_dict()):
            logger.info("Profile saved fields=%s", sorted(patch))
            self.updated.emit(merged)
        return merged

    def subscribe(self, callback: Callable[[ProfileData], None]) -> Callable[[], None]:
        return self.updated.subscribe(callback)


def avatar_initials(profile: ProfileData) -> str:
    if profile.name:
        return profile.name[:2].upper()
    return DEFAULT_AVATAR_INITIALS
