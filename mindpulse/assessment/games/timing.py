"""
Clocks and schedulers used by the game state machines.

Games never read the wall clock. They read a time source through
``scheduler.clock`` and advance only from callbacks registered with
``scheduler.call_later``. Two pairings exist:

  VirtualScheduler + ManualTimeSource: virtual time, used by tests and simulation
  AsyncioScheduler + MonotonicTimeSource: real time on an asyncio event loop

Every scheduler returns handles exposing ``cancel()``, matching asyncio.TimerHandle.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import time


class MonotonicTimeSource:
    """Millisecond clock backed by time.perf_counter(); immune to wall-clock changes."""

    def now(self) -> float:
        return time.perf_counter() * 1000.0

    def elapsed_since(self, start_ms: float) -> float:
        return self.now() - start_ms


class ManualTimeSource:
    """Millisecond clock that only moves when told to. It never moves backwards."""

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)

    def now(self) -> float:
        return self._now

    def elapsed_since(self, start_ms: float) -> float:
        return self._now - start_ms

    def advance(self, ms: float) -> float:
        if ms < 0:
            raise ValueError(f"Cannot move a clock backwards ({ms} ms)")
        self._now += ms
        return self._now

    def advance_to(self, target_ms: float) -> float:
        if target_ms < self._now:
            raise ValueError(f"Cannot move a clock backwards to {target_ms} ms (now {self._now} ms)")
        self._now = float(target_ms)
        return self._now


class TimerHandle:
    """A callback registered with VirtualScheduler."""

    __slots__ = ("due_ms", "_callback", "_args", "_cancelled")

    def __init__(self, due_ms: float, callback, args: tuple):
        self.due_ms = due_ms
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        self._callback = None
        self._args = ()

    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        if not self._cancelled:
            self._callback(*self._args)


class VirtualScheduler:
    """
    Single timer queue running on a ManualTimeSource.

    Callbacks fire in due-time order (ties in registration order) and the clock
    is moved to each callback's due time before it runs, so a callback observes
    exactly the instant it was scheduled for.
    """

    def __init__(self, clock: ManualTimeSource | None = None):
        self.clock = clock or ManualTimeSource()
        self._queue: list = []
        self._counter = itertools.count()

    def call_later(self, delay_ms: float, callback, *args) -> TimerHandle:
        handle = TimerHandle(self.clock.now() + max(delay_ms, 0), callback, args)
        heapq.heappush(self._queue, (handle.due_ms, next(self._counter), handle))
        return handle

    def pending(self) -> int:
        """Number of callbacks still waiting to fire."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled())

    def advance(self, ms: float) -> int:
        """Run every callback due within the next *ms* milliseconds; return how many ran."""
        target = self.clock.now() + ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self.clock.advance_to(handle.due_ms)
            handle._run()
            ran += 1
        self.clock.advance_to(target)
        return ran

    def run_until_idle(self, max_callbacks: int = 1_000_000) -> int:
        """Run callbacks until none are pending; return how many ran."""
        ran = 0
        while self._queue:
            _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            if ran >= max_callbacks:
                raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks")
            self.clock.advance_to(handle.due_ms)
            handle._run()
            ran += 1
        return ran


class AsyncioScheduler:
    """
    Real-time scheduler on the running asyncio event loop.

    Drive games with :func:`base.play_until_done`; an exception raised inside a
    plain loop callback only reaches the loop's exception handler.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.clock = MonotonicTimeSource()
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback, *args) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay_ms, 0) / 1000.0, callback, *args)
