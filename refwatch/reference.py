#=============================================================================
# File        : refwatch/reference.py
# Project     : RefWatch v1.0
# Component   : References - Keyed Weak References and Notification Queue
# Description : Weak handles for watched objects and the queue they report to
#               • weakref.ref subclass carrying key, name and watch time
#               • Referent type captured before it can be reclaimed
#               • Non-blocking reference queue fed from weakref callbacks
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Weak References
# Standards   : PEP 8, Type Hints, Production Safety
# Created     : 2025-10-19
# Modified    : 2025-10-19 (Initial creation)
# Dependencies: queue, weakref
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import queue
import weakref
from typing import Any, Optional


def describe_type(obj: Any) -> str:
    """Qualified class name of obj, e.g. 'myapp.views.DetailView'."""
    cls = type(obj)
    module = getattr(cls, '__module__', None)
    qualname = getattr(cls, '__qualname__', cls.__name__)
    if module in (None, 'builtins'):
        return qualname
    return f"{module}.{qualname}"


class ReferenceQueue:
    """
    Queue that receives KeyedWeakReference instances once their referent
    is about to be reclaimed.

    enqueue() runs inside weakref callbacks, which the interpreter may
    fire on any thread and in the middle of other code (including while
    a watcher lock is held), so it relies only on SimpleQueue.put, which
    is reentrant.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue = queue.SimpleQueue()

    def enqueue(self, reference: "KeyedWeakReference") -> None:
        self._queue.put(reference)

    def poll(self) -> Optional["KeyedWeakReference"]:
        """Return the next reclaimed reference, or None without blocking."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def __len__(self) -> int:
        return self._queue.qsize()


class KeyedWeakReference(weakref.ref):
    """
    Weak reference identified by a unique key.

    Never keeps its referent alive. When the referent becomes
    unreachable the reference enqueues itself on the queue it was
    created with.
    """

    def __new__(cls, referent: Any, key: str, name: str,
                watch_uptime_ms: int, reference_queue: ReferenceQueue):
        return super().__new__(cls, referent, reference_queue.enqueue)

    def __init__(self, referent: Any, key: str, name: str,
                 watch_uptime_ms: int, reference_queue: ReferenceQueue) -> None:
        super().__init__(referent, reference_queue.enqueue)
        self.key = key
        self.name = name
        self.watch_uptime_ms = watch_uptime_ms
        self.class_name = describe_type(referent)

    def __repr__(self) -> str:
        state = "alive" if self() is not None else "dead"
        return (f"KeyedWeakReference(key='{self.key}', name='{self.name}', "
                f"class_name='{self.class_name}', {state})")
