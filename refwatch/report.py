#=============================================================================
# File        : refwatch/report.py
# Project     : RefWatch v1.0
# Component   : Report - Retained Instance and Report Data Structures
# Description : Data structures describing objects that outlived their watch
#               • RetainedInstance snapshot with validation and serialization
#               • RetentionReport with per-class grouping and summaries
#               • Report stamps for deduplication between polls
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Dataclasses, JSON
# Standards   : PEP 8, Type Hints, Immutable Data Structures
# Created     : 2025-08-19
# Modified    : 2025-10-19 (Reworked for retained references)
# Dependencies: json, time, hashlib, platform, dataclasses, typing
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import hashlib
import json
import os
import platform
import sys
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RetainedInstance:
    """
    Immutable snapshot of one retained reference.

    Taken under the retention table lock; `alive` may already be stale
    by the time the snapshot is read.
    """
    key: str
    name: str
    class_name: str
    watch_uptime_ms: int
    watched_for_ms: int
    alive: bool = True

    def __post_init__(self):
        if not self.key:
            raise ValueError("RetainedInstance requires a key")
        if self.watched_for_ms < 0:
            raise ValueError(f"watched_for_ms cannot be negative, got {self.watched_for_ms}")

    @property
    def label(self) -> str:
        """Name if one was given, otherwise the class name."""
        return self.name or self.class_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'name': self.name,
            'class_name': self.class_name,
            'watch_uptime_ms': self.watch_uptime_ms,
            'watched_for_ms': self.watched_for_ms,
            'alive': self.alive,
        }


@dataclass(frozen=True)
class RetentionReport:
    """
    Point-in-time view of a watcher's retained references.

    Lists what is retained, not why: no reference chains are computed.
    """
    created_at: float
    instances: List[RetainedInstance]
    stamp: str
    pending_count: int = field(default=0)
    memory_current_mb: float = field(default=0.0)

    # Environment context
    process_name: Optional[str] = None
    python_version: Optional[str] = None
    platform: Optional[str] = None

    @property
    def retained_count(self) -> int:
        return len(self.instances)

    @property
    def retained_keys(self) -> List[str]:
        return [instance.key for instance in self.instances]

    def count_by_class(self) -> Dict[str, int]:
        """Retained instance counts per class, most common first."""
        return dict(Counter(i.class_name for i in self.instances).most_common())

    def oldest(self, n: int = 5) -> List[RetainedInstance]:
        return sorted(self.instances, key=lambda i: i.watched_for_ms, reverse=True)[:n]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'created_at': self.created_at,
            'stamp': self.stamp,
            'retained_count': self.retained_count,
            'pending_count': self.pending_count,
            'memory_current_mb': self.memory_current_mb,
            'process_name': self.process_name,
            'python_version': self.python_version,
            'platform': self.platform,
            'instances': [instance.to_dict() for instance in self.instances],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def summary(self) -> str:
        """Generate human-readable summary."""
        if not self.instances:
            return "No retained instances."

        lines = [f"RefWatch Report Summary ({self.retained_count} retained, "
                 f"{self.pending_count} pending)"]
        for class_name, count in self.count_by_class().items():
            lines.append(f"  {class_name}: {count}")
        lines.append("\nOldest retained:")
        for i, instance in enumerate(self.oldest(3), 1):
            lines.append(f"  {i}. {instance.label} [{instance.key}] "
                         f"watched for {instance.watched_for_ms / 1000.0:.1f}s")
        return "\n".join(lines)


def make_report_stamp(instances: List[RetainedInstance]) -> str:
    """
    Hash of the retained keys, identical for reports listing the same keys.
    """
    if not instances:
        return hashlib.sha256(b"empty").hexdigest()[:16]
    stamp_string = "|".join(sorted(instance.key for instance in instances))
    return hashlib.sha256(stamp_string.encode('utf-8')).hexdigest()[:16]


def create_report(instances: List[RetainedInstance],
                  pending_count: int = 0,
                  memory_current_mb: float = 0.0) -> RetentionReport:
    """Build a RetentionReport stamped with the current process context."""
    return RetentionReport(
        created_at=time.time(),
        instances=list(instances),
        stamp=make_report_stamp(instances),
        pending_count=pending_count,
        memory_current_mb=memory_current_mb,
        process_name=os.path.basename(sys.argv[0]) if sys.argv else 'unknown',
        python_version=platform.python_version(),
        platform=platform.system(),
    )
