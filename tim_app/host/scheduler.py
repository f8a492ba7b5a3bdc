"""
Timer facilities for debouncing.

``AsyncioScheduler`` defers callbacks on a running event loop.
``ManualScheduler`` keeps a virtual clock that only moves when told to,
which makes debounce behaviour reproducible in tests and benchmarks.
"""

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from ..errors import HostFacilityError


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules callbacks with ``loop.call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise HostFacilityError(
                    "No running event loop to schedule on",
                    facility="scheduler",
                    operation="call_later",
                ) from e
        return loop.call_later(delay_s, callback)


@dataclass(order=True)
class ManualTimer:
    """Timer entry of a ManualScheduler; ordered by due time then creation."""
    due: float
    seq: int
    callback: Callable[[], Any] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock scheduler advanced explicitly."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self._timers: list[ManualTimer] = []
        self._seq = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(due=self.now + max(delay_s, 0.0), seq=next(self._seq), callback=callback)
        heapq.heappush(self._timers, timer)
        return timer

    @property
    def pending(self) -> int:
        """Number of timers neither fired nor cancelled."""
        return sum(1 for timer in self._timers if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every timer that comes due.

        Timers scheduled by callbacks fire too if they fall inside the
        window. Returns the number of callbacks run.
        """
        target = self.now + seconds
        fired = 0
        while self._timers and self._timers[0].due <= target:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self.now = timer.due
            timer.callback()
            fired += 1
        self.now = target
        return fired

    def run_all(self) -> int:
        """Fire timers until none are left."""
        fired = 0
        while self._timers:
            next_due = self._timers[0].due
            fired += self.advance(max(next_due - self.now, 0.0))
        return fired
