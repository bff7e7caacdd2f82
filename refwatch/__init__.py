#=============================================================================
# File        : refwatch/__init__.py
# Project     : RefWatch v1.0 - Open Source
# Component   : Package Initialization
# Description : Detects objects that outlive their expected lifetime
#               • Weak reference watching with a reclaim notification queue
#               • Grace period driven pending -> retained transitions
#               • Pluggable clocks and delayed schedulers
#               • Process-wide install() for hosts without their own wiring
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Threading, AsyncIO, Weak References
# Standards   : PEP 8, Type Hints, Dataclasses
# Created     : 2025-08-19
# Modified    : 2025-10-19 (Reference watching release)
# Dependencies: typing, threading, weakref, psutil
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. Released under MIT License.
#=============================================================================

"""
RefWatch - Retained Object Detection for Python

Register an object that should soon become unreachable; if it is still
strongly reachable once the grace period has passed, RefWatch reports it
as retained (a likely leak).

Quick Start:
    import refwatch

    refwatch.install()

    # When a component is torn down:
    refwatch.watch(closed_session, "closed session")

    # Later:
    print(refwatch.get_report().summary())
"""

from .core import (
    install,
    uninstall,
    configure,
    is_installed,
    get_ref_watcher,
    watch,
    get_report,
    get_status
)

from .config import RefWatchConfig

from .clock import Clock, UptimeClock, ManualClock

from .scheduling import (
    Scheduler,
    ThreadedScheduler,
    AsyncioScheduler,
    ManualScheduler
)

from .reference import KeyedWeakReference, ReferenceQueue

from .retention import RetentionTable

from .watcher import RefWatcher

from .report import RetainedInstance, RetentionReport

from .collect import run_gc

__version__ = "1.0.0"
__author__ = "Kyle Clouthier"
__license__ = "MIT"

__all__ = [
    # Process-wide watcher
    "install",
    "uninstall",
    "configure",
    "is_installed",
    "get_ref_watcher",
    "watch",
    "get_report",
    "get_status",

    # Configuration
    "RefWatchConfig",

    # Clocks and schedulers
    "Clock",
    "UptimeClock",
    "ManualClock",
    "Scheduler",
    "ThreadedScheduler",
    "AsyncioScheduler",
    "ManualScheduler",

    # Watching
    "KeyedWeakReference",
    "ReferenceQueue",
    "RetentionTable",
    "RefWatcher",

    # Reporting
    "RetainedInstance",
    "RetentionReport",

    # Utils
    "run_gc",

    # Metadata
    "__version__",
    "__author__",
    "__license__"
]
