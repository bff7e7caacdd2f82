#=============================================================================
# File        : refwatch/scheduling.py
# Project     : RefWatch v1.0
# Component   : Scheduling - Delayed Retention Check Executors
# Description : Host-supplied "run this after N ms" primitives
#               • Dedicated daemon thread with a due-time heap
#               • Asyncio event loop bridge (thread-safe submission)
#               • Manual scheduler driven by a ManualClock for tests
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Threading, AsyncIO
# Standards   : PEP 8, Type Hints, Production Safety
# Created     : 2025-10-19
# Modified    : 2025-10-19 (Initial creation)
# Dependencies: asyncio, heapq, itertools, threading, clock, logs
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
from typing import Callable, List, Optional, Protocol, Tuple, runtime_checkable

from .clock import Clock, ManualClock, UptimeClock
from .logs import get_logger

_logger = get_logger(__name__)

Callback = Callable[[], None]


@runtime_checkable
class Scheduler(Protocol):
    """
    Protocol for delayed execution.

    The callback must run after at least delay_ms, and never on the
    caller's stack. Cancellation is not part of the contract.
    """

    def schedule(self, delay_ms: int, callback: Callback) -> None:
        ...


def _run_callback(callback: Callback) -> None:
    try:
        callback()
    except Exception:
        _logger.exception("Scheduled retention check failed")


class ThreadedScheduler:
    """
    Runs callbacks on one dedicated daemon thread.

    The thread is started lazily on the first schedule() call and parked
    on a condition variable until the earliest callback is due. Due times
    are read from the given clock; with a clock other than UptimeClock
    the worker re-reads it at least every poll_interval_s, since such a
    clock can move without waking the thread.
    """

    def __init__(self, name: str = "RefWatch-CheckRetained",
                 clock: Optional[Clock] = None,
                 poll_interval_s: float = 0.05) -> None:
        self._name = name
        self._clock = clock if clock is not None else UptimeClock()
        self._max_wait_s = None if isinstance(self._clock, UptimeClock) else poll_interval_s
        self._queue: List[Tuple[int, int, Callback]] = []
        self._counter = itertools.count()
        self._condition = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._shutdown = False

    def schedule(self, delay_ms: int, callback: Callback) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms cannot be negative, got {delay_ms}")
        due = self._clock.uptime_millis() + delay_ms
        with self._condition:
            if self._shutdown:
                raise RuntimeError("Cannot schedule after shutdown")
            heapq.heappush(self._queue, (due, next(self._counter), callback))
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._worker_loop,
                    name=self._name,
                    daemon=True
                )
                self._thread.start()
            self._condition.notify()

    def _worker_loop(self) -> None:
        _logger.debug(f"{self._name} started")
        while True:
            with self._condition:
                while not self._shutdown:
                    if not self._queue:
                        self._condition.wait()
                        continue
                    remaining_ms = self._queue[0][0] - self._clock.uptime_millis()
                    if remaining_ms <= 0:
                        break
                    wait_s = remaining_ms / 1000.0
                    if self._max_wait_s is not None:
                        wait_s = min(wait_s, self._max_wait_s)
                    self._condition.wait(wait_s)
                if self._shutdown:
                    break
                _, _, callback = heapq.heappop(self._queue)
            _run_callback(callback)
        _logger.debug(f"{self._name} stopped")

    @property
    def pending_count(self) -> int:
        with self._condition:
            return len(self._queue)

    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def shutdown(self, timeout: float = 2.0) -> None:
        """Stop the worker thread; callbacks not yet due are dropped."""
        with self._condition:
            self._shutdown = True
            dropped = len(self._queue)
            self._queue.clear()
            self._condition.notify_all()
            thread = self._thread
        if dropped:
            _logger.debug(f"{self._name} dropped {dropped} pending checks on shutdown")
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)


class AsyncioScheduler:
    """Schedules callbacks with loop.call_later; safe to call from any thread."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    def schedule(self, delay_ms: int, callback: Callback) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms cannot be negative, got {delay_ms}")
        self._loop.call_soon_threadsafe(
            self._loop.call_later, delay_ms / 1000.0, _run_callback, callback
        )


class ManualScheduler:
    """
    Deterministic scheduler for tests and hosts that pump their own loop.

    Callbacks become due against the given ManualClock and only run
    inside run_due().
    """

    def __init__(self, clock: ManualClock) -> None:
        self._clock = clock
        self._queue: List[Tuple[int, int, Callback]] = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def schedule(self, delay_ms: int, callback: Callback) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms cannot be negative, got {delay_ms}")
        due = self._clock.uptime_millis() + delay_ms
        with self._lock:
            heapq.heappush(self._queue, (due, next(self._counter), callback))

    def run_due(self) -> int:
        """Run every callback due at the current clock reading, in due order."""
        ran = 0
        now = self._clock.uptime_millis()
        while True:
            with self._lock:
                if not self._queue or self._queue[0][0] > now:
                    return ran
                _, _, callback = heapq.heappop(self._queue)
            callback()
            ran += 1

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._queue)
