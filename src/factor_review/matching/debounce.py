"""
Trailing-edge debounce over an injected scheduler.

A scheduler is anything with ``call_later(delay_seconds, callback)``
returning a handle with ``cancel()``. An asyncio event loop fits as-is;
``ManualScheduler`` is a virtual clock for deterministic drivers. With no
injected scheduler and no running loop, a trigger is delivered at once.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class ManualHandle:
    """Handle returned by ``ManualScheduler.call_later``."""

    def __init__(self, when: float, callback: Callable[[], Any]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual-clock scheduler.

    Nothing fires on its own: ``advance()`` moves the clock forward and
    runs every task that came due, in due-time order.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._queue: list[tuple[float, int, ManualHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled, not-yet-cancelled tasks."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run due tasks. Returns how many ran."""
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = when
            handle.callback()
            ran += 1
        self.now = target
        return ran

    def run_pending(self) -> int:
        """Run every outstanding task regardless of due time."""
        ran = 0
        while self._queue:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, when)
            handle.callback()
            ran += 1
        return ran


class Debouncer:
    """
    Single-slot cancellable delayed task.

    Each ``trigger()`` cancels the outstanding task (if any) and schedules
    a new one, so at most one is pending. Only the value passed to the last
    trigger before the quiet period ends reaches ``callback``.
    """

    def __init__(
        self,
        delay_ms: int,
        callback: Callable[[Any], None],
        scheduler: Optional[Scheduler] = None,
    ):
        self.delay_ms = delay_ms
        self.callback = callback
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None

    def _current_scheduler(self) -> Optional[Scheduler]:
        """Injected scheduler, else the running asyncio loop, else None.

        The loop is looked up on every call and never cached.
        """
        if self._scheduler is not None:
            return self._scheduler
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    def trigger(self, value: Any) -> None:
        """Restart the quiet period with a new value."""
        self.cancel()
        scheduler = self._current_scheduler()
        if scheduler is None:
            # Nothing to wait on outside an event loop
            self._fire(value)
            return
        self._handle = scheduler.call_later(
            self.delay_ms / 1000.0, lambda: self._fire(value)
        )

    def cancel(self) -> None:
        """Drop the pending task without firing it."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: Any) -> None:
        self._handle = None
        logger.debug(f"Debounce settled after {self.delay_ms}ms: {value!r}")
        self.callback(value)
