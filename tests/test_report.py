#=============================================================================
# File        : tests/test_report.py
# Project     : RefWatch v1.0
# Component   : Report and Memory Test Suite
# Description : Retained instance snapshots, report stamps and RSS providers
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Created     : 2025-10-19
#=============================================================================

import json
import sys
from pathlib import Path

import pytest

# Add refwatch to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent))

from refwatch import memory
from refwatch.memory import MemoryTracker, NullProvider, PsutilProvider
from refwatch.report import RetainedInstance, create_report, make_report_stamp


def _instance(key, class_name="app.View", watched_for_ms=6000, name=""):
    return RetainedInstance(
        key=key,
        name=name,
        class_name=class_name,
        watch_uptime_ms=0,
        watched_for_ms=watched_for_ms,
    )


def test_instance_validation():
    with pytest.raises(ValueError):
        _instance("")
    with pytest.raises(ValueError):
        _instance("k", watched_for_ms=-1)


def test_instance_label_prefers_name():
    assert _instance("k", name="checkout").label == "checkout"
    assert _instance("k").label == "app.View"


def test_stamp_ignores_order():
    a, b = _instance("a"), _instance("b")
    assert make_report_stamp([a, b]) == make_report_stamp([b, a])
    assert make_report_stamp([a]) != make_report_stamp([a, b])
    assert len(make_report_stamp([])) == 16


def test_report_grouping_and_export():
    report = create_report(
        [_instance("a", watched_for_ms=100),
         _instance("b", class_name="app.Dialog", watched_for_ms=900),
         _instance("c", watched_for_ms=500)],
        pending_count=2,
        memory_current_mb=64.0,
    )
    assert report.retained_count == 3
    assert report.count_by_class() == {"app.View": 2, "app.Dialog": 1}
    assert [i.key for i in report.oldest(2)] == ["b", "c"]

    data = json.loads(report.to_json())
    assert data['pending_count'] == 2
    assert data['memory_current_mb'] == 64.0
    assert {i['key'] for i in data['instances']} == {"a", "b", "c"}
    assert data['python_version']

    summary = report.summary()
    assert "3 retained, 2 pending" in summary
    assert "app.Dialog: 1" in summary


def test_empty_report_summary():
    assert create_report([]).summary() == "No retained instances."


def test_memory_tracker_prefers_psutil():
    tracker = MemoryTracker()
    assert tracker.get_provider_type() == "PsutilProvider"
    assert tracker.is_available()
    assert tracker.get_rss_mb() > 0


def test_psutil_provider_reads_rss():
    assert PsutilProvider().get_rss_mb() > 0


def test_null_provider_is_unavailable():
    tracker = MemoryTracker(NullProvider())
    assert tracker.is_available() is False
    assert tracker.get_rss_mb() == 0.0


def test_force_provider_replaces_global_tracker():
    try:
        memory.force_provider(NullProvider())
        assert memory.get_memory_tracker().get_provider_type() == "NullProvider"
    finally:
        memory.reset_global_state()
    assert memory.get_memory_tracker().get_provider_type() == "PsutilProvider"
