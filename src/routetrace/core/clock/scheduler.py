"""Timer scheduling for activity trackers.

Trackers never touch platform timers directly: they ask a Scheduler for
cancellable handles and own those handles until the span finishes. All times
are monotonic milliseconds.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(ABC):
    @abstractmethod
    def now(self) -> float:
        """Current monotonic time in milliseconds."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms``. Returns a cancellable handle."""


class VirtualTimer:
    __slots__ = ("due", "seq", "callback", "cancelled")

    def __init__(self, due: float, seq: int, callback: Callable[[], None]):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: "VirtualTimer") -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class VirtualScheduler(Scheduler):
    """Deterministic scheduler driven by explicit ``advance()`` calls.

    Timers fire in (due time, scheduling order). A callback may schedule or
    cancel other timers; newly scheduled timers that fall due inside the
    current advance window fire in the same call.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: list[VirtualTimer] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> VirtualTimer:
        timer = VirtualTimer(self._now + max(0.0, float(delay_ms)), next(self._seq), callback)
        heapq.heappush(self._queue, timer)
        return timer

    def pending(self) -> int:
        """Number of timers still armed."""
        return sum(1 for timer in self._queue if not timer.cancelled)

    def advance(self, delta_ms: float) -> None:
        if delta_ms < 0:
            raise ValueError("Cannot move a virtual clock backwards")
        self.advance_to(self._now + delta_ms)

    def advance_to(self, target: float) -> None:
        if target < self._now:
            raise ValueError("Cannot move a virtual clock backwards")
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.due
            timer.callback()
        self._now = target


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)
