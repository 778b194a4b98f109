# src/dia_maestro/suggest/debounce.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Cancellable delayed call on the asyncio event loop.

    Each call cancels the pending timer (if any) and schedules the callback
    `delay` seconds later with the latest arguments. Coroutine callbacks are
    started as tasks when the timer fires; cancel() only drops the timer, a
    callback already running is left alone.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[..., Any],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        self._handle = self._get_loop().call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        try:
            result = self._callback(*args)
        except Exception:
            logger.exception("Debounced callback %r failed.", self._callback)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result, loop=self._get_loop())
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced task failed.", exc_info=exc)

    async def drain(self) -> None:
        """Wait for callback tasks that are already running (used on shutdown and in tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
