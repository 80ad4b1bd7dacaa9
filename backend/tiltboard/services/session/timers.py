"""Cancellable timers for room ticks, respawns and the reaper.

Two schedulers share one interface: ``every(interval, callback)`` and
``after(delay, callback)``, both returning a :class:`TimerHandle`.

- :class:`SocketIOScheduler` runs callbacks on Flask-SocketIO background
  tasks, so it follows whatever async mode the server picked.
- :class:`ManualScheduler` never fires on its own; ``advance(seconds)`` runs
  whatever became due. Used when the app is TESTING.
"""

import itertools
import logging
from typing import Callable, List, Optional


class TimerHandle:
    _seq = itertools.count()

    def __init__(self, callback: Callable[[], None], interval: Optional[float], due_at: float = 0.0):
        self.callback = callback
        self.interval = interval
        self.due_at = due_at
        self.seq = next(self._seq)
        self.cancelled = False

    @property
    def recurring(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    def __init__(self, socketio, logger=None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)

    def _run_callback(self, handle: TimerHandle) -> None:
        try:
            handle.callback()
        except Exception:
            self.logger.exception(f"[timer-error] callback={getattr(handle.callback, '__name__', handle.callback)}")

    def every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback, interval)

        def _runner():
            while not handle.cancelled:
                self.socketio.sleep(interval)
                if handle.cancelled:
                    break
                self._run_callback(handle)

        self.socketio.start_background_task(_runner)
        return handle

    def after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback, None)

        def _runner():
            self.socketio.sleep(delay)
            if not handle.cancelled:
                handle.cancelled = True
                self._run_callback(handle)

        self.socketio.start_background_task(_runner)
        return handle


class ManualScheduler:
    """Deterministic scheduler driven by ``advance``.

    Callback exceptions propagate to the caller of ``advance``.
    """

    def __init__(self):
        self.now = 0.0
        self._handles: List[TimerHandle] = []

    def every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback, interval, due_at=self.now + interval)
        self._handles.append(handle)
        return handle

    def after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback, None, due_at=self.now + delay)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> List[TimerHandle]:
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            self._handles = self.pending
            due = [h for h in self._handles if h.due_at <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due_at, h.seq))
            self.now = max(self.now, handle.due_at)
            if handle.recurring:
                handle.due_at += handle.interval
            else:
                handle.cancelled = True
            handle.callback()
        self.now = target
