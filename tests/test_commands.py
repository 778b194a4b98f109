# tests/test_commands.py

from __future__ import annotations

import pytest

from dia_maestro.cli.bootstrap import create_initial_state
from dia_maestro.cli.commands import CommandRegistry, registry
from dia_maestro.connectors.console_connector import handle_line
from dia_maestro.core.state import AppState
from dia_maestro.llm.offline import OfflineLLMClient
from dia_maestro.storage.kv_store import InMemoryKeyValueStore

from .fakes import FakeLLMClient


@pytest.fixture()
def state(settings) -> AppState:
    return create_initial_state(
        settings=settings,
        storage=InMemoryKeyValueStore(),
        llm=FakeLLMClient('{"categorySuggestions": ["Pets", "Outdoor"]}'),
    )


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called == {"h2": 1, "h3": 1}


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_add_list_move_done_delete(state) -> None:
    assert "added" in (registry.handle(state, "/add Buy milk; tags=errand, home; due=2026-10-20") or "")
    handle_line(state, "Walk dog")

    listing = registry.handle(state, "/tasks") or ""
    assert listing.splitlines() == [
        "1. [ ] Buy milk  #errand #home  due 2026-10-20",
        "2. [ ] Walk dog",
    ]

    registry.handle(state, "/move 2 1")
    assert [t.name for t in state.tasks.sorted_tasks()] == ["Walk dog", "Buy milk"]

    registry.handle(state, "/done 1")
    assert state.tasks.sorted_tasks()[0].completed is True

    registry.handle(state, "/del 2")
    assert [t.name for t in state.tasks.tasks] == ["Walk dog"]


def test_add_rejects_bad_input(state) -> None:
    assert "required" in (registry.handle(state, "/add ; tags=x") or "")
    assert "Invalid due date" in (registry.handle(state, "/add Pay; due=tomorrow") or "")
    assert "No worker" in (registry.handle(state, "/add Pay; worker=9") or "")
    assert len(state.tasks) == 0


def test_assignment_and_dangling_worker(state) -> None:
    registry.handle(state, "/worker add Ana; Sales")
    registry.handle(state, "/worker add Kim; Ops")
    reply = registry.handle(state, "/add Call client; worker=1") or ""
    assert "assigned to Ana" in reply

    assert (registry.handle(state, "/workers") or "").splitlines() == ["Sales (1)", "  1. Ana", "Ops (1)", "  2. Kim"]

    registry.handle(state, "/worker del 1")
    assert "(no assignee)" in (registry.handle(state, "/tasks") or "")
    assert state.tasks.tasks[0].assigned_to_id is not None


def test_edit_task_fields(state) -> None:
    registry.handle(state, "/worker add Ana; Sales")
    registry.handle(state, "/add Draft report")

    registry.handle(state, "/edit 1; name=Final report; tags=work; worker=1; due=2026-12-01")
    task = state.tasks.tasks[0]
    assert (task.name, task.tags, task.due_date) == ("Final report", ["work"], "2026-12-01")
    assert task.assigned_to_id == state.workers.workers[0].id

    registry.handle(state, "/edit 1; worker=; due=")
    task = state.tasks.tasks[0]
    assert task.assigned_to_id is None
    assert task.due_date is None


def test_suggest_command(state) -> None:
    emitted: list[str] = []
    reply = registry.handle(state, "/suggest Walk the dog", emit=emitted.append) or ""
    assert reply == "Suggested tags: Pets, Outdoor"
    assert emitted
    assert "at least 3" in (registry.handle(state, "/suggest ab") or "")


def test_profile_command_validates_and_saves(state) -> None:
    assert "not valid" in (registry.handle(state, "/profile name=Ana; email=nope") or "")
    assert "saved" in (registry.handle(state, "/profile name=Ana; email=ana@example.com") or "")
    assert state.profile.load().email == "ana@example.com"
    assert "[AN]" in (registry.handle(state, "/status") or "")


def test_handle_line_never_raises(state, monkeypatch) -> None:
    def boom(*args, **kwargs):
        raise RuntimeError("bug")

    monkeypatch.setattr(state.tasks, "add_task", boom)
    assert handle_line(state, "crash please") == "Internal error while handling a command."


def test_bootstrap_falls_back_to_offline_llm_without_key(settings) -> None:
    settings.openrouter_api_key = None
    settings.openrouter_base_url = "https://openrouter.ai/api/v1"
    state = create_initial_state(settings=settings, storage=InMemoryKeyValueStore())

    assert isinstance(state.llm, OfflineLLMClient)
    assert state.suggestions.suggest("Walk the dog") == []
    assert state.notifications.errors() == []


def test_bootstrap_uses_sqlite_storage_by_default(settings) -> None:
    state = create_initial_state(settings=settings, llm=FakeLLMClient())
    state.tasks.add_task("Persisted", [])

    again = create_initial_state(settings=settings, llm=FakeLLMClient())
    assert [t.name for t in again.tasks.tasks] == ["Persisted"]


def test_profile_command_clears_bio(state) -> None:
    registry.handle(state, "/profile name=Ana; bio=Old bio")

    assert "saved" in (registry.handle(state, "/profile bio=") or "")

    profile = state.profile.load()
    assert (profile.name, profile.bio) == ("Ana", "")
    assert "Bio: -" in (registry.handle(state, "/profile") or "")


def test_plain_text_keeps_the_whole_line_as_task_name(state) -> None:
    reply = handle_line(state, "Buy milk; eggs and bread")

    assert reply == '"Buy milk; eggs and bread" was added to your list.'
    assert [t.name for t in state.tasks.tasks] == ["Buy milk; eggs and bread"]
    assert state.tasks.tasks[0].tags == []


def test_field_segments_without_equals_are_rejected(state) -> None:
    reply = registry.handle(state, "/add Buy milk; eggs and bread") or ""
    assert "Expected key=value" in reply
    assert "'eggs and bread'" in reply
    assert len(state.tasks) == 0

    assert "added" in (registry.handle(state, "/add Buy milk; tags=home;") or "")
    assert state.tasks.tasks[0].tags == ["home"]

    assert "Expected key=value" in (registry.handle(state, "/edit 1; tea") or "")
    assert "Expected key=value" in (registry.handle(state, "/profile bio=Likes; tea") or "")
    assert state.profile.load().bio is None


def test_suggest_command_follows_configured_min_chars(settings) -> None:
    settings.suggest_min_chars = 5
    llm = FakeLLMClient('{"categorySuggestions": ["Pets"]}')
    state = create_initial_state(settings=settings, storage=InMemoryKeyValueStore(), llm=llm)

    assert "at least 5" in (registry.handle(state, "/suggest Walk") or "")
    assert llm.calls == []
    assert registry.handle(state, "/suggest Walks") == "Suggested tags: Pets"
