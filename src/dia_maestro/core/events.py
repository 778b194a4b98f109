# src/dia_maestro/core/events.py

"""
Explicit publish/subscribe helpers.

- EventHook: a typed subscriber list (replaces ambient global browser events).
- NotificationCenter: the Notifier used by storage and the suggestion gateway
  to surface transient, non-blocking messages to the user.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NotificationLevel(StrEnum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    description: str
    level: NotificationLevel = NotificationLevel.INFO

    @property
    def is_error(self) -> bool:
        return self.level == NotificationLevel.ERROR


class EventHook(Generic[T]):
    """Ordered list of callbacks; a failing callback never stops the others."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def emit(self, value: T) -> None:
        for cb in list(self._subscribers):
            try:
                cb(value)
            except Exception:
                logger.exception("Event subscriber %r failed.", cb)

    def __len__(self) -> int:
        return len(self._subscribers)


class NotificationCenter:
    """
    Notifier implementation: logs, remembers the last `history_size`
    notifications, and forwards them to subscribers (e.g. the console).
    """

    def __init__(self, history_size: int = 50) -> None:
        self.history: deque[Notification] = deque(maxlen=history_size)
        self.on_notify: EventHook[Notification] = EventHook()

    def notify(self, notification: Notification) -> None:
        if notification.is_error:
            logger.warning("%s: %s", notification.title, notification.description)
        else:
            logger.info("%s: %s", notification.title, notification.description)
        self.history.append(notification)
        self.on_notify.emit(notification)

    def subscribe(self, callback: Callable[[Notification], None]) -> Callable[[], None]:
        return self.on_notify.subscribe(callback)

    def errors(self) -> list[Notification]:
        return [n for n in self.history if n.is_error]
