# src/dia_maestro/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.events import Notification
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _print_notification(n: Notification) -> None:
    prefix = "[ERROR]" if n.is_error else "[INFO]"
    _print_ts(f"{prefix} {n.title}: {n.description}")


def handle_line(state: AppState, line: str) -> str | None:
    """
    One REPL step: slash commands go to the registry, plain text adds a task.
    Plain text is taken verbatim as the task name (no "; key=value" fields).
    Never raises.
    """
    try:
        reply = command_registry.handle(state, line, emit=_print_ts)
        if reply is None:
            task = state.tasks.add_task(line.strip(), [])
            reply = f'"{task.name}" was added to your list.'
    except Exception:
        logger.exception("Command handler crashed. line=%r", line)
        reply = "Internal error while handling a command."
    return reply


def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(state.settings, "app_name", "Dia Maestro"))
    logger.info("Console connector started.")

    # Anything reported while the state was being built (e.g. a broken stored list).
    for n in list(state.notifications.history):
        _print_notification(n)
    unsubscribe = state.notifications.subscribe(_print_notification)

    _print_ts(f"[{app_name}] Type a task name to add it. Use /help for commands. Use /exit to quit.\n")

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            reply = handle_line(state, user_input)
            if reply:
                print(reply)
    finally:
        unsubscribe()
