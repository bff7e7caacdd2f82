#=============================================================================
# File        : refwatch/collect.py
# Project     : RefWatch v1.0
# Component   : Collection - Forced Garbage Collection
# Description : Runs the cyclic collector so that objects merely waiting on
#               cycle collection are not mistaken for retained ones
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, GC
# Standards   : PEP 8, Type Hints
# Created     : 2025-08-19
# Modified    : 2025-10-19 (Reworked for reference watching)
# Dependencies: gc, time
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import gc
import platform
import time
from typing import Any, Dict

from .logs import get_logger

_logger = get_logger(__name__)

# PyPy and Jython do not free objects on the last reference drop
_GC_UNRELIABLE = platform.python_implementation() in ('PyPy', 'Jython')


def run_gc(passes: int = 2, pause_s: float = 0.0) -> Dict[str, Any]:
    """
    Force full garbage collection and return collection statistics.

    Args:
        passes: Full collections to run; a second pass picks up objects
                released by finalizers during the first
        pause_s: Sleep between passes, giving finalizer threads a chance to run
    """
    collected = []
    for i in range(max(1, passes)):
        collected.append(gc.collect())
        if pause_s and i + 1 < passes:
            time.sleep(pause_s)

    stats = {
        "collected_by_pass": collected,
        "total_collected": sum(collected),
        "garbage": len(gc.garbage),
        "gc_reliable": not _GC_UNRELIABLE,
    }
    _logger.debug(f"Forced GC collected {stats['total_collected']} objects")
    return stats
