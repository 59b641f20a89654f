from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Single-threaded timer source used for debounced draft writes.

    Callbacks run on the scheduler's own thread of control; there is never
    more than one callback executing at a time.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def now(self) -> datetime: ...


class _VirtualTimer:
    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """Deterministic scheduler: time only moves when `advance` is called.

    Timers due at the same instant fire in the order they were scheduled.
    Timers scheduled by a callback fire within the same `advance` call if
    they fall due before its target time.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._elapsed = 0.0
        self._queue: list[tuple[float, int, _VirtualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _VirtualTimer:
        timer = _VirtualTimer(callback)
        heapq.heappush(self._queue, (self._elapsed + max(delay, 0.0), next(self._seq), timer))
        return timer

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed)

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """Move time forward, firing every timer that falls due.

        Returns:
            Number of callbacks fired.
        """
        target = self._elapsed + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self._elapsed = due
            if timer.cancelled:
                continue
            timer.cancelled = True
            timer.callback()
            fired += 1
        self._elapsed = target
        return fired


class EventLoopScheduler:
    """Scheduler backed by an asyncio event loop, for live sessions."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
