#=============================================================================
# File        : refwatch/clock.py
# Project     : RefWatch v1.0
# Component   : Clock - Monotonic Uptime Sources
# Description : Injectable uptime clocks for grace period bookkeeping
#               • Monotonic clock immune to wall-clock adjustments
#               • Manual clock for deterministic tests
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, time, threading
# Standards   : PEP 8, Type Hints
# Created     : 2025-10-19
# Modified    : 2025-10-19 (Initial creation)
# Dependencies: time, threading
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import threading
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol for uptime clocks."""

    def uptime_millis(self) -> int:
        """Milliseconds since an arbitrary fixed point, never going backwards."""
        ...


class UptimeClock:
    """Clock backed by time.monotonic_ns()."""

    def uptime_millis(self) -> int:
        return time.monotonic_ns() // 1_000_000


class ManualClock:
    """
    Clock that only moves when told to.

    Thread-safe so a test can advance it while watcher threads read it.
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = start_ms
        self._lock = threading.Lock()

    def uptime_millis(self) -> int:
        with self._lock:
            return self._now_ms

    def advance(self, delta_ms: int) -> int:
        if delta_ms < 0:
            raise ValueError("Manual clock cannot move backwards")
        with self._lock:
            self._now_ms += delta_ms
            return self._now_ms

    def set(self, now_ms: int) -> None:
        with self._lock:
            if now_ms < self._now_ms:
                raise ValueError("Manual clock cannot move backwards")
            self._now_ms = now_ms
