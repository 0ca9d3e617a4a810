"""
Scheduler
=========

Cooperative virtual-time timers. Nothing runs on its own thread: the owner
calls advance(dt) once per tick and due callbacks run in order on the caller's
thread.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    """Cancellation handle returned by the scheduling primitives."""

    def __init__(self, callback: Callable[[], None], interval: Optional[float] = None):
        self._callback = callback
        self._interval = interval
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self._interval is not None

    def cancel(self) -> None:
        """Prevent any future firing. Safe to call more than once."""
        self._cancelled = True


class Scheduler:
    """
    Virtual clock with one-shot and interval timers.

    Callbacks fire in due-time order, ties in scheduling order. A callback
    that schedules another timer which is already due sees it fire within
    the same advance() call.
    """

    def __init__(self):
        self._now: float = 0.0
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Run callback once after delay seconds.

        Args:
            delay: Seconds from now; negative values are treated as 0.
            callback: Zero-argument callable.

        Returns:
            Handle whose cancel() discards the pending call.
        """
        handle = TimerHandle(callback)
        self._push(self._now + max(0.0, delay), handle)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Run callback every interval seconds, first after one interval.

        Raises:
            ValueError: If interval is not positive.
        """
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        handle = TimerHandle(callback, interval)
        self._push(self._now + interval, handle)
        return handle

    def advance(self, dt: float) -> int:
        """
        Move the clock forward and fire every timer that came due.

        Args:
            dt: Seconds to advance.

        Returns:
            Number of callbacks fired.
        """
        target = self._now + max(0.0, dt)
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            if handle.repeating:
                self._push(due + handle._interval, handle)
            handle._callback()
            fired += 1

        self._now = target
        return fired

    def cancel_all(self) -> None:
        """Discard every pending timer."""
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()

    def _push(self, due: float, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (due, next(self._counter), handle))
