#=============================================================================
# File        : refwatch/watcher.py
# Project     : RefWatch v1.0
# Component   : RefWatcher - Public Detector API
# Description : Enable-gated facade over the retention table
#               • watch() ignored entirely while the gate reports disabled
#               • Reads, acknowledgements and resets always available
#               • Report snapshots of retained references
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Weak References
# Standards   : PEP 8, Type Hints, Production Safety
# Created     : 2025-10-19
# Modified    : 2025-10-19 (Initial creation)
# Dependencies: clock, config, memory, report, retention, scheduling
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .clock import Clock, UptimeClock
from .config import DEFAULT_WATCH_DURATION_MS, RefWatchConfig
from .memory import MemoryTracker
from .report import RetainedInstance, RetentionReport, create_report
from .retention import OnReferenceRetained, RetentionTable
from .scheduling import Scheduler


def _always_enabled() -> bool:
    return True


class RefWatcher:
    """
    Watches objects that are expected to become unreachable.

    Example:
        watcher = RefWatcher(
            clock=UptimeClock(),
            check_retained_scheduler=ThreadedScheduler(),
            on_reference_retained=lambda ref: print(ref.class_name),
        )
        watcher.watch(closed_view, "closed detail view")
    """

    def __init__(self,
                 clock: Clock,
                 check_retained_scheduler: Scheduler,
                 on_reference_retained: OnReferenceRetained,
                 is_enabled: Callable[[], bool] = _always_enabled,
                 watch_duration_ms: int = DEFAULT_WATCH_DURATION_MS) -> None:
        # Calls to watch() are ignored when is_enabled() returns False
        self._is_enabled = is_enabled
        self._table = RetentionTable(
            clock=clock,
            scheduler=check_retained_scheduler,
            on_reference_retained=on_reference_retained,
            watch_duration_ms=watch_duration_ms,
        )

    @classmethod
    def from_config(cls,
                    config: RefWatchConfig,
                    check_retained_scheduler: Scheduler,
                    on_reference_retained: OnReferenceRetained,
                    clock: Optional[Clock] = None) -> "RefWatcher":
        """Build a watcher whose gate and grace period come from a fixed config."""
        return cls(
            clock=clock or UptimeClock(),
            check_retained_scheduler=check_retained_scheduler,
            on_reference_retained=on_reference_retained,
            is_enabled=config.is_enabled,
            watch_duration_ms=config.watch_duration_ms,
        )

    @property
    def retention_table(self) -> RetentionTable:
        return self._table

    @property
    def watch_duration_ms(self) -> int:
        return self._table.watch_duration_ms

    @watch_duration_ms.setter
    def watch_duration_ms(self, value: int) -> None:
        self._table.watch_duration_ms = value

    def is_enabled(self) -> bool:
        return bool(self._is_enabled())

    def watch(self, watched_reference: Any, reference_name: str = "") -> Optional[str]:
        """
        Watch the provided object.

        Returns the watch key, or None when watching is disabled.
        """
        if not self._is_enabled():
            return None
        return self._table.watch(watched_reference, reference_name)

    @property
    def has_retained_references(self) -> bool:
        return self._table.has_retained_references

    @property
    def has_watched_references(self) -> bool:
        return self._table.has_watched_references

    @property
    def retained_keys(self) -> Set[str]:
        return self._table.retained_keys

    def remove_retained_keys(self, keys_to_remove: Iterable[str]) -> None:
        self._table.remove_retained_keys(keys_to_remove)

    def clear_watched_references(self) -> None:
        self._table.clear_watched_references()

    def get_retained_info(self) -> List[RetainedInstance]:
        return self._table.get_retained_info()

    def get_stats(self) -> Dict[str, int]:
        return self._table.get_stats()

    def create_report(self, memory_tracker: Optional[MemoryTracker] = None) -> RetentionReport:
        """Snapshot retained references into a RetentionReport."""
        memory_mb = 0.0
        if memory_tracker is not None and memory_tracker.is_available():
            memory_mb = memory_tracker.get_rss_mb()
        return create_report(
            self._table.get_retained_info(),
            pending_count=self._table.watched_count,
            memory_current_mb=memory_mb,
        )
