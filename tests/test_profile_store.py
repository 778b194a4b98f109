# tests/test_profile_store.py

from __future__ import annotations

import json

from dia_maestro.core.models import ProfileData
from dia_maestro.profile.profile_store import ProfileStore, avatar_initials
from dia_maestro.storage.record_store import RecordStore

from .fakes import CountingKeyValueStore

KEY = "diaMaestroProfile"


def test_save_merges_over_stored_profile_and_notifies(records, storage) -> None:
    store = ProfileStore(records, key=KEY)
    seen: list[ProfileData] = []
    store.subscribe(seen.append)

    store.save(ProfileData(name="Ana", email="ana@example.com", avatar_data_url="data:image/png;base64,AAA"))
    merged = store.save({"bio": "Sales lead"})

    assert merged == ProfileData(
        name="Ana", email="ana@example.com", bio="Sales lead", avatar_data_url="data:image/png;base64,AAA"
    )
    assert store.load() == merged
    assert json.loads(storage.get_item(KEY) or "")["avatarDataUrl"] == "data:image/png;base64,AAA"
    assert seen[-1] == merged
    assert len(seen) == 2


def test_unsubscribe_stops_updates(records) -> None:
    store = ProfileStore(records, key=KEY)
    seen: list[ProfileData] = []
    unsubscribe = store.subscribe(seen.append)

    unsubscribe()
    store.save({"name": "Leo"})

    assert seen == []


def test_failed_write_does_not_publish(notifier) -> None:
    storage = CountingKeyValueStore()
    storage.fail_writes = True
    store = ProfileStore(RecordStore(storage, notifier), key=KEY)
    seen: list[ProfileData] = []
    store.subscribe(seen.append)

    result = store.save({"name": "Kim"})

    assert result.name == "Kim"
    assert seen == []
    assert len(notifier.errors) == 1


def test_corrupted_profile_loads_empty(notifier) -> None:
    store = ProfileStore(RecordStore(CountingKeyValueStore({KEY: "{oops"}), notifier), key=KEY)

    assert store.load() == ProfileData()
    assert len(notifier.errors) == 1


def test_avatar_initials() -> None:
    assert avatar_initials(ProfileData(name="ana maria")) == "AN"
    assert avatar_initials(ProfileData()) == "SA"


def test_empty_string_clears_a_stored_field(records, storage) -> None:
    store = ProfileStore(records, key=KEY)
    store.save({"name": "Ana", "bio": "Old bio"})

    merged = store.save({"bio": ""})

    assert merged.bio == ""
    assert merged.name == "Ana"
    assert json.loads(storage.get_item(KEY) or "") == {"name": "Ana", "bio": ""}
    assert store.load().bio == ""
