from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from flask_socketio import SocketIO


logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback that runs at most once and can be cancelled."""

    def __init__(self, callback: Callable[..., Any], args: tuple = ()) -> None:
        self._callback = callback
        self._args = args
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        self._cancelled = True

    def run(self) -> None:
        if not self.pending:
            return
        self._fired = True
        try:
            self._callback(*self._args)
        except Exception:
            logger.exception("timer callback %r failed", self._callback)


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class SocketIOScheduler:
    """Runs timers as Socket.IO background tasks (green threads under eventlet)."""

    def __init__(self, socketio: SocketIO) -> None:
        self.socketio = socketio

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        handle = TimerHandle(callback, args)
        self.socketio.start_background_task(self._sleep_then_run, delay, handle)
        return handle

    def _sleep_then_run(self, delay: float, handle: TimerHandle) -> None:
        self.socketio.sleep(delay)
        handle.run()
