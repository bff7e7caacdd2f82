#=============================================================================
# File        : refwatch/retention.py
# Project     : RefWatch v1.0
# Component   : Retention Table - Watched and Retained Reference Tracking
# Description : Authoritative state of every watched object
#               • Pending and retained maps keyed by unique watch keys
#               • Reference queue drain before every read and mutation
#               • Delayed pending -> retained transition via the scheduler
#               • Per-table statistics for overhead monitoring
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Threading, Weak References
# Standards   : PEP 8, Type Hints, Production Safety
# Created     : 2025-10-19
# Modified    : 2025-10-19 (Initial creation)
# Dependencies: functools, threading, uuid, clock, scheduling, reference, report
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import functools
import threading
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .clock import Clock
from .logs import get_logger
from .reference import KeyedWeakReference, ReferenceQueue
from .report import RetainedInstance
from .scheduling import Scheduler

_logger = get_logger(__name__)

OnReferenceRetained = Callable[[KeyedWeakReference], None]


def _new_stats() -> Dict[str, int]:
    return {
        'watched': 0,
        'retained': 0,
        'reclaimed': 0,
        'checks': 0,
        'stale_checks': 0,
        'removed': 0,
    }


class RetentionTable:
    """
    Tracks watched objects through weak references.

    A watched object starts in the pending map. Once the grace period has
    elapsed the scheduler calls check_retained(); if the object has not
    been reclaimed by then it moves to the retained map and the
    on_reference_retained callback fires.

    Thread safe by locking on every operation, which is cheap given how
    rarely these methods are called.
    """

    def __init__(self,
                 clock: Clock,
                 scheduler: Scheduler,
                 on_reference_retained: OnReferenceRetained,
                 watch_duration_ms: int) -> None:
        if watch_duration_ms < 0:
            raise ValueError(f"watch_duration_ms cannot be negative, got {watch_duration_ms}")
        self._clock = clock
        self._scheduler = scheduler
        self._on_reference_retained = on_reference_retained
        self._watch_duration_ms = watch_duration_ms

        # References passed to watch() that haven't made it to _retained yet
        self._watched: Dict[str, KeyedWeakReference] = {}
        # References that outlived the grace period
        self._retained: Dict[str, KeyedWeakReference] = {}
        self._queue = ReferenceQueue()
        self._lock = threading.RLock()
        self._stats = _new_stats()

    # --------- Configuration ---------

    @property
    def watch_duration_ms(self) -> int:
        with self._lock:
            return self._watch_duration_ms

    @watch_duration_ms.setter
    def watch_duration_ms(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"watch_duration_ms cannot be negative, got {value}")
        with self._lock:
            self._watch_duration_ms = value

    # --------- Reads ---------

    @property
    def has_retained_references(self) -> bool:
        with self._lock:
            self._remove_weakly_reachable_references()
            return bool(self._retained)

    @property
    def has_watched_references(self) -> bool:
        with self._lock:
            self._remove_weakly_reachable_references()
            return bool(self._retained) or bool(self._watched)

    @property
    def retained_keys(self) -> Set[str]:
        with self._lock:
            self._remove_weakly_reachable_references()
            return set(self._retained)

    @property
    def watched_keys(self) -> Set[str]:
        """Keys still inside their grace period."""
        with self._lock:
            self._remove_weakly_reachable_references()
            return set(self._watched)

    @property
    def retained_count(self) -> int:
        with self._lock:
            self._remove_weakly_reachable_references()
            return len(self._retained)

    @property
    def watched_count(self) -> int:
        with self._lock:
            self._remove_weakly_reachable_references()
            return len(self._watched)

    def get_retained_info(self) -> List[RetainedInstance]:
        """Snapshot of every retained reference, oldest watch first."""
        with self._lock:
            self._remove_weakly_reachable_references()
            now = self._clock.uptime_millis()
            instances = [
                RetainedInstance(
                    key=ref.key,
                    name=ref.name,
                    class_name=ref.class_name,
                    watch_uptime_ms=ref.watch_uptime_ms,
                    watched_for_ms=max(0, now - ref.watch_uptime_ms),
                    alive=ref() is not None,
                )
                for ref in self._retained.values()
            ]
        instances.sort(key=lambda instance: instance.watch_uptime_ms)
        return instances

    # --------- Mutations ---------

    def watch(self, watched_reference: Any, reference_name: str = "") -> str:
        """
        Watch the provided object and return its key.

        Args:
            watched_reference: Object expected to become unreachable soon
            reference_name: Logical identifier for the watched object

        Raises:
            TypeError: if the object cannot be weakly referenced
        """
        if not isinstance(reference_name, str):
            raise TypeError(f"reference_name must be a str, got {type(reference_name).__name__}")

        with self._lock:
            self._remove_weakly_reachable_references()
            key = str(uuid.uuid4())
            while key in self._watched or key in self._retained:
                key = str(uuid.uuid4())
            reference = KeyedWeakReference(
                watched_reference, key, reference_name,
                self._clock.uptime_millis(), self._queue
            )
            if reference_name:
                _logger.debug(f"Watching instance of {reference.class_name} "
                              f"named {reference_name} with key {key}")
            else:
                _logger.debug(f"Watching instance of {reference.class_name} with key {key}")

            self._watched[key] = reference
            try:
                self._scheduler.schedule(
                    self._watch_duration_ms,
                    functools.partial(self.check_retained, key)
                )
            except Exception:
                del self._watched[key]
                raise
            self._stats['watched'] += 1
        return key

    def check_retained(self, key: str) -> bool:
        """
        Move key from pending to retained if its object is still reachable.

        Returns True when the transition happened. A key that was already
        reclaimed, moved or cleared makes this a no-op.
        """
        with self._lock:
            self._remove_weakly_reachable_references()
            self._stats['checks'] += 1
            reference = self._watched.pop(key, None)
            if reference is None:
                self._stats['stale_checks'] += 1
                return False
            self._retained[key] = reference
            self._stats['retained'] += 1

        _logger.debug(f"Instance of {reference.class_name} with key {key} retained "
                      f"after {self._clock.uptime_millis() - reference.watch_uptime_ms} ms")
        self._on_reference_retained(reference)
        return True

    def remove_retained_keys(self, keys_to_remove: Iterable[str]) -> None:
        with self._lock:
            for key in keys_to_remove:
                if self._retained.pop(key, None) is not None:
                    self._stats['removed'] += 1

    def clear_watched_references(self) -> None:
        with self._lock:
            self._watched.clear()
            self._retained.clear()

    def _remove_weakly_reachable_references(self) -> None:
        # Weak references are enqueued as soon as the referent is about to
        # be reclaimed, before its memory is actually released.
        while True:
            reference: Optional[KeyedWeakReference] = self._queue.poll()
            if reference is None:
                return
            removed = self._watched.pop(reference.key, None)
            if removed is None:
                removed = self._retained.pop(reference.key, None)
            if removed is not None:
                self._stats['reclaimed'] += 1
                _logger.debug(f"Instance of {reference.class_name} with key "
                              f"{reference.key} was reclaimed")

    # --------- Statistics ---------

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            self._remove_weakly_reachable_references()
            stats = self._stats.copy()
            stats['pending_now'] = len(self._watched)
            stats['retained_now'] = len(self._retained)
        return stats

    def reset_stats(self) -> None:
        """Reset statistics (for testing/benchmarking)."""
        with self._lock:
            self._stats = _new_stats()
