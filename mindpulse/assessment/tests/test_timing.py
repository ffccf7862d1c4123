"""Tests for clocks and schedulers."""
import asyncio

import pytest

from mindpulse.assessment.games.timing import AsyncioScheduler
from mindpulse.assessment.games.timing import ManualTimeSource
from mindpulse.assessment.games.timing import MonotonicTimeSource
from mindpulse.assessment.games.timing import VirtualScheduler


class TestManualTimeSource:
    def test_advance(self):
        clock = ManualTimeSource(start_ms=100)
        assert clock.advance(50) == 150
        assert clock.elapsed_since(120) == 30

    def test_never_moves_backwards(self):
        clock = ManualTimeSource(start_ms=100)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.advance_to(99)


class TestMonotonicTimeSource:
    def test_is_non_decreasing(self):
        clock = MonotonicTimeSource()
        first = clock.now()
        assert clock.now() >= first
        assert clock.elapsed_since(first) >= 0


class TestVirtualScheduler:
    def test_runs_in_due_order_with_fifo_ties(self):
        scheduler = VirtualScheduler()
        fired = []
        scheduler.call_later(10, fired.append, "b")
        scheduler.call_later(5, fired.append, "a")
        scheduler.call_later(10, fired.append, "c")
        assert scheduler.run_until_idle() == 3
        assert fired == ["a", "b", "c"]
        assert scheduler.clock.now() == 10

    def test_callback_sees_its_due_time(self):
        scheduler = VirtualScheduler()
        seen = []
        scheduler.call_later(250, lambda: seen.append(scheduler.clock.now()))
        scheduler.run_until_idle()
        assert seen == [250]

    def test_advance_runs_only_due_callbacks(self):
        scheduler = VirtualScheduler()
        fired = []
        scheduler.call_later(5, fired.append, 5)
        scheduler.call_later(20, fired.append, 20)
        assert scheduler.advance(7) == 1
        assert fired == [5]
        assert scheduler.clock.now() == 7
        assert scheduler.pending() == 1

    def test_cancelled_handle_never_fires(self):
        scheduler = VirtualScheduler()
        fired = []
        handle = scheduler.call_later(5, fired.append, "x")
        handle.cancel()
        assert handle.cancelled()
        assert scheduler.pending() == 0
        assert scheduler.run_until_idle() == 0
        assert fired == []

    def test_nested_scheduling_is_relative_to_now(self):
        scheduler = VirtualScheduler()
        seen = []
        scheduler.call_later(100, lambda: scheduler.call_later(50, lambda: seen.append(scheduler.clock.now())))
        scheduler.run_until_idle()
        assert seen == [150]

    def test_run_until_idle_guards_against_runaway_loops(self):
        scheduler = VirtualScheduler()

        def again():
            scheduler.call_later(1, again)

        scheduler.call_later(1, again)
        with pytest.raises(RuntimeError):
            scheduler.run_until_idle(max_callbacks=50)


class TestAsyncioScheduler:
    def test_call_later_fires_on_running_loop(self):
        async def scenario():
            scheduler = AsyncioScheduler()
            done = asyncio.get_running_loop().create_future()
            start = scheduler.clock.now()
            scheduler.call_later(5, done.set_result, "fired")
            result = await asyncio.wait_for(done, timeout=5)
            return result, scheduler.clock.elapsed_since(start)

        result, elapsed = asyncio.run(scenario())
        assert result == "fired"
        assert elapsed > 0

    def test_cancel(self):
        async def scenario():
            scheduler = AsyncioScheduler()
            fired = []
            handle = scheduler.call_later(1, fired.append, "x")
            handle.cancel()
            await asyncio.sleep(0.02)
            return fired

        assert asyncio.run(scenario()) == []
