# src/dia_maestro/cli/commands.py

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable
from datetime import date
from typing import cast

from ..core.models import Task, Worker
from ..core.state import AppState
from ..llm.offline import OfflineLLMClient
from ..profile.profile_store import avatar_initials
from ..suggest.gateway import parse_tags
from ..workers.worker_registry import find_assignee, group_by_department

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_BIO_CHARS = 500


class FieldSyntaxError(ValueError):
    """A ';'-separated segment is not of the form key=value."""


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _split_fields(args: list[str]) -> tuple[str, dict[str, str]]:
    """
    "Buy milk; tags=errand, home; due=2026-10-20" ->
    ("Buy milk", {"tags": "errand, home", "due": "2026-10-20"})

    Blank segments are ignored; any other segment without "=" raises.
    """
    text = " ".join(args)
    head, *rest = text.split(";")
    fields: dict[str, str] = {}
    for seg in rest:
        if not seg.strip():
            continue
        if "=" not in seg:
            raise FieldSyntaxError(f"Expected key=value after ';', got '{seg.strip()}'.")
        k, v = seg.split("=", 1)
        fields[k.strip().lower()] = v.strip()
    return head.strip(), fields


def _task_at(state: AppState, raw: str) -> Task | None:
    """Tasks are addressed by their 1-based position in the displayed (sorted) list."""
    try:
        n = int(raw)
    except ValueError:
        return None
    tasks = state.tasks.sorted_tasks()
    if 1 <= n <= len(tasks):
        return tasks[n - 1]
    return None


def _worker_at(state: AppState, raw: str) -> Worker | None:
    try:
        n = int(raw)
    except ValueError:
        return None
    workers = state.workers.workers
    if 1 <= n <= len(workers):
        return workers[n - 1]
    return None


def _parse_due(raw: str) -> date | None:
    return date.fromisoformat(raw) if raw else None


def format_task_line(n: int, task: Task, workers: list[Worker]) -> str:
    mark = "x" if task.completed else " "
    parts = [f"{n}. [{mark}] {task.name}"]
    if task.tags:
        parts.append(" ".join(f"#{t}" for t in task.tags))
    if task.assigned_to_id:
        worker = find_assignee(task, workers)
        parts.append(f"@{worker.name} ({worker.department})" if worker else "(no assignee)")
    if task.due_date:
        parts.append(f"due {task.due_date}")
    return "  ".join(parts)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    profile = state.profile.load()
    offline = isinstance(state.llm, OfflineLLMClient)
    models = ", ".join(list(getattr(state.settings, "llm_models", []) or []))
    done = sum(1 for t in state.tasks.tasks if t.completed)
    return (
        "Status:\n"
        f"  User: {profile.name or '-'} [{avatar_initials(profile)}]\n"
        f"  Tasks: {len(state.tasks)} ({done} done)\n"
        f"  Workers: {len(state.workers)}\n"
        f"  Suggestions: {'OFFLINE' if offline else models}"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    tasks = state.tasks.sorted_tasks()
    if not tasks:
        return "No tasks yet. Add one with /add <name>."
    workers = state.workers.workers
    return "\n".join(format_task_line(i, t, workers) for i, t in enumerate(tasks, start=1))


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <name>[; tags=a, b][; worker=<n>][; due=YYYY-MM-DD]
    """
    usage = "Usage: /add <name>; tags=a, b; worker=<n>; due=YYYY-MM-DD"
    try:
        name, fields = _split_fields(args)
    except FieldSyntaxError as e:
        return f"{e} {usage}"
    if not name:
        return f"Task name is required. {usage}"

    try:
        due = _parse_due(fields.get("due", ""))
    except ValueError:
        return "Invalid due date. Use YYYY-MM-DD."

    worker: Worker | None = None
    if fields.get("worker"):
        worker = _worker_at(state, fields["worker"])
        if worker is None:
            return f"No worker #{fields['worker']}. See /workers."

    task = state.tasks.add_task(
        name,
        parse_tags(fields.get("tags")),
        assigned_to_id=worker.id if worker else None,
        due_date=due,
    )
    assigned = f" and assigned to {worker.name}" if worker else ""
    return f'"{task.name}" was added to your list{assigned}.'


def cmd_done(state: AppState, args: list[str]) -> str:
    task = _task_at(state, args[0]) if args else None
    if task is None:
        return "Usage: /done <n> (see /tasks)."
    updated = state.tasks.toggle_complete(task.id)
    if updated is None:
        return "Task no longer exists."
    return f'"{updated.name}" marked as {"done" if updated.completed else "not done"}.'


def cmd_del(state: AppState, args: list[str]) -> str:
    task = _task_at(state, args[0]) if args else None
    if task is None:
        return "Usage: /del <n> (see /tasks)."
    state.tasks.delete_task(task.id)
    return f'"{task.name}" was deleted.'


def cmd_move(state: AppState, args: list[str]) -> str:
    """
    /move <n> <m>  -> drop task n onto task m (same as drag and drop)
    """
    if len(args) != 2:
        return "Usage: /move <n> <m> (see /tasks)."
    dragged = _task_at(state, args[0])
    target = _task_at(state, args[1])
    if dragged is None or target is None:
        return "No such task. See /tasks."
    if not state.tasks.reorder(dragged.id, target.id):
        return "Nothing to move."
    return cmd_tasks(state, [])


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <n>; name=...; tags=a, b; worker=<n or empty>; due=YYYY-MM-DD or empty
    """
    usage = "Usage: /edit <n>; name=...; tags=a, b; worker=<n>; due=YYYY-MM-DD"
    try:
        head, fields = _split_fields(args)
    except FieldSyntaxError as e:
        return f"{e} {usage}"
    task = _task_at(state, head)
    if task is None or not fields:
        return usage

    changes: dict[str, object] = {}
    if "name" in fields:
        if not fields["name"]:
            return "Task name is required."
        changes["name"] = fields["name"]
    if "tags" in fields:
        changes["tags"] = parse_tags(fields["tags"])
    if "worker" in fields:
        if fields["worker"]:
            worker = _worker_at(state, fields["worker"])
            if worker is None:
                return f"No worker #{fields['worker']}. See /workers."
            changes["assigned_to_id"] = worker.id
        else:
            changes["assigned_to_id"] = None
    if "due" in fields:
        try:
            changes["due_date"] = _parse_due(fields["due"])
        except ValueError:
            return "Invalid due date. Use YYYY-MM-DD."

    if not changes:
        return "Nothing to change."
    updated = state.tasks.edit_task(task.id, **changes)
    return f'"{updated.name}" was updated.' if updated else "Task no longer exists."


def cmd_workers(state: AppState, args: list[str]) -> str:
    workers = state.workers.workers
    if not workers:
        return "No workers yet. Add one with /worker add <name>; <department>."
    numbers = {w.id: i for i, w in enumerate(workers, start=1)}
    lines: list[str] = []
    for department, members in group_by_department(workers).items():
        lines.append(f"{department} ({len(members)})")
        for w in members:
            lines.append(f"  {numbers[w.id]}. {w.name}")
    return "\n".join(lines)


def cmd_worker(state: AppState, args: list[str]) -> str:
    """
    /worker add <name>; <department>
    /worker del <n>
    """
    if not args:
        return "Usage: /worker add <name>; <department> | /worker del <n>"

    sub = args[0].lower()

    if sub == "add":
        text = " ".join(args[1:])
        name, _, department = text.partition(";")
        name, department = name.strip(), department.strip()
        if not name or not department:
            return "Name and department are required. Usage: /worker add <name>; <department>"
        worker = state.workers.add_worker(name, department)
        return f"{worker.name} from {worker.department} was added."

    if sub in ("del", "rm"):
        worker = _worker_at(state, args[1]) if len(args) > 1 else None
        if worker is None:
            return "Usage: /worker del <n> (see /workers)."
        state.workers.delete_worker(worker.id)
        return f"{worker.name} was removed. Tasks assigned to them are not reassigned."

    return "Usage: /worker add <name>; <department> | /worker del <n>"


def cmd_suggest(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    name = " ".join(args)
    min_chars = state.suggestions.min_chars
    if len(name.strip()) < min_chars:
        return f"Type at least {min_chars} characters to get suggestions."
    if emit:
        emit("Generating AI suggestions...")
    suggestions = state.suggestions.suggest(name)
    if not suggestions:
        return "No suggestions."
    return "Suggested tags: " + ", ".join(suggestions)


def cmd_profile(state: AppState, args: list[str]) -> str:
    """
    /profile                              -> show profile
    /profile name=...; email=...; bio=... -> update profile
    """
    if not args:
        p = state.profile.load()
        return (
            "Profile:\n"
            f"  Name: {p.name or '-'}\n"
            f"  Email: {p.email or '-'}\n"
            f"  Bio: {p.bio or '-'}"
        )

    usage = "Usage: /profile name=...; email=...; bio=..."
    try:
        _, fields = _split_fields([";"] + args)
    except FieldSyntaxError as e:
        return f"{e} {usage}"
    changes = {k: v for k, v in fields.items() if k in ("name", "email", "bio")}
    if not changes:
        return usage
    if "name" in changes and not changes["name"]:
        return "Name is required."
    if "email" in changes and not EMAIL_RE.match(changes["email"]):
        return "Email is not valid."
    if len(changes.get("bio", "")) > MAX_BIO_CHARS:
        return f"Bio cannot exceed {MAX_BIO_CHARS} characters."

    state.profile.save(changes)
    return "Your personal data was saved."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show counts and suggestion mode.")
registry.register("tasks", cmd_tasks, help_text="List tasks in display order.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <name>; tags=a, b; worker=<n>; due=YYYY-MM-DD.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.")
registry.register("del", cmd_del, help_text="Delete a task: /del <n>.", aliases=["rm"])
registry.register("move", cmd_move, help_text="Reorder: /move <n> <m> drops task n onto task m.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <n>; name=...; tags=...; worker=...; due=....")
registry.register("workers", cmd_workers, help_text="List workers by department.")
registry.register("worker", cmd_worker, help_text="Manage workers: /worker add <name>; <dept> | /worker del <n>.")
registry.register("suggest", cmd_suggest, help_text="AI tag suggestions for a task name: /suggest <name>.")
registry.register("profile", cmd_profile, help_text="Show or update your profile: /profile name=...; email=....")
