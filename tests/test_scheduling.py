#=============================================================================
# File        : tests/test_scheduling.py
# Project     : RefWatch v1.0
# Component   : Scheduler and Clock Test Suite
# Description : Delayed execution guarantees of every scheduler
#               • Threaded scheduler ordering, delay and shutdown
#               • Asyncio bridge from foreign threads
#               • Manual scheduler and clock determinism
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Created     : 2025-10-19
#=============================================================================

import asyncio
import sys
import threading
import time
from pathlib import Path

import pytest

# Add refwatch to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent))

from refwatch.clock import Clock, ManualClock, UptimeClock
from refwatch.scheduling import (
    AsyncioScheduler, ManualScheduler, Scheduler, ThreadedScheduler
)


@pytest.fixture
def threaded():
    scheduler = ThreadedScheduler(name="RefWatch-Test")
    yield scheduler
    scheduler.shutdown()


class TestClocks:

    def test_uptime_clock_is_monotonic(self):
        clock = UptimeClock()
        readings = [clock.uptime_millis() for _ in range(100)]
        assert readings == sorted(readings)
        assert isinstance(clock, Clock)

    def test_manual_clock(self):
        clock = ManualClock(start_ms=10)
        assert clock.uptime_millis() == 10
        assert clock.advance(5) == 15
        clock.set(20)
        assert clock.uptime_millis() == 20
        with pytest.raises(ValueError):
            clock.set(19)
        with pytest.raises(ValueError):
            clock.advance(-1)


class TestThreadedScheduler:

    def test_runs_after_delay_on_another_thread(self, threaded):
        done = threading.Event()
        result = {}
        start = time.monotonic()

        def callback():
            result['thread'] = threading.current_thread().name
            result['elapsed'] = time.monotonic() - start
            done.set()

        threaded.schedule(50, callback)
        assert done.wait(2.0)
        assert result['thread'] == "RefWatch-Test"
        assert result['elapsed'] >= 0.05

    def test_runs_in_due_order(self, threaded):
        order = []
        done = threading.Event()

        def record(label):
            order.append(label)
            if len(order) == 3:
                done.set()

        threaded.schedule(60, lambda: record("late"))
        threaded.schedule(0, lambda: record("now"))
        threaded.schedule(30, lambda: record("soon"))
        assert done.wait(2.0)
        assert order == ["now", "soon", "late"]

    def test_failing_callback_does_not_stop_worker(self, threaded):
        done = threading.Event()

        def boom():
            raise RuntimeError("listener failed")

        threaded.schedule(0, boom)
        threaded.schedule(10, done.set)
        assert done.wait(2.0)
        assert threaded.is_running()

    def test_shutdown_drops_pending_and_rejects_new(self):
        scheduler = ThreadedScheduler()
        fired = threading.Event()
        scheduler.schedule(10_000, fired.set)
        assert scheduler.pending_count == 1

        scheduler.shutdown()
        assert scheduler.pending_count == 0
        assert not scheduler.is_running()
        assert not fired.is_set()
        with pytest.raises(RuntimeError):
            scheduler.schedule(0, fired.set)

    def test_negative_delay_rejected(self, threaded):
        with pytest.raises(ValueError):
            threaded.schedule(-1, lambda: None)

    def test_satisfies_protocol(self, threaded):
        assert isinstance(threaded, Scheduler)

    def test_due_times_follow_injected_clock(self):
        clock = ManualClock(start_ms=100)
        scheduler = ThreadedScheduler(clock=clock, poll_interval_s=0.01)
        fired = threading.Event()
        try:
            scheduler.schedule(1000, fired.set)
            # Wall time passing does not make the check due
            assert not fired.wait(0.1)
            clock.advance(999)
            assert not fired.wait(0.05)
            clock.advance(1)
            assert fired.wait(2.0)
        finally:
            scheduler.shutdown()


class TestAsyncioScheduler:

    def test_schedule_from_loop(self):
        async def main():
            scheduler = AsyncioScheduler()
            fired = asyncio.Event()
            start = asyncio.get_running_loop().time()
            scheduler.schedule(20, fired.set)
            assert not fired.is_set()
            await asyncio.wait_for(fired.wait(), 2.0)
            return asyncio.get_running_loop().time() - start

        assert asyncio.run(main()) >= 0.015

    def test_schedule_from_foreign_thread(self):
        async def main():
            loop = asyncio.get_running_loop()
            scheduler = AsyncioScheduler(loop)
            fired = asyncio.Event()
            ran_on = []

            def callback():
                ran_on.append(threading.current_thread())
                fired.set()

            worker = threading.Thread(target=scheduler.schedule, args=(10, callback))
            worker.start()
            worker.join()
            await asyncio.wait_for(fired.wait(), 2.0)
            return ran_on[0] is threading.current_thread()

        assert asyncio.run(main()) is True


class TestManualScheduler:

    def test_nothing_runs_until_due(self):
        clock = ManualClock()
        scheduler = ManualScheduler(clock)
        fired = []
        scheduler.schedule(100, lambda: fired.append("a"))
        scheduler.schedule(50, lambda: fired.append("b"))

        assert fired == []
        clock.set(99)
        assert scheduler.run_due() == 1
        assert fired == ["b"]
        clock.set(100)
        assert scheduler.run_due() == 1
        assert fired == ["b", "a"]
        assert scheduler.pending_count == 0

    def test_delay_is_relative_to_schedule_time(self):
        clock = ManualClock(start_ms=1000)
        scheduler = ManualScheduler(clock)
        fired = []
        scheduler.schedule(10, lambda: fired.append(clock.uptime_millis()))
        clock.set(1009)
        scheduler.run_due()
        assert fired == []
        clock.set(1010)
        scheduler.run_due()
        assert fired == [1010]
