#=============================================================================
# File        : refwatch/core.py
# Project     : RefWatch v1.0
# Component   : Core - Default Process Watcher
# Description : Composition root for hosts that want one process-wide watcher
#               • install()/uninstall() lifecycle with owned scheduler thread
#               • Live configuration (enable gate read on every watch)
#               • Default retained listener and status reporting
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Threading
# Standards   : PEP 8, Type Hints, Production Safety
# Created     : 2025-08-19
# Modified    : 2025-10-19 (Reworked around RefWatcher)
# Dependencies: config, clock, scheduling, watcher, memory, report
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import atexit
import threading
import time
from typing import Any, Dict, Optional

from .clock import Clock, UptimeClock
from .config import RefWatchConfig
from .logs import get_logger, set_log_level
from .memory import get_memory_tracker
from .reference import KeyedWeakReference
from .report import RetentionReport, create_report
from .retention import OnReferenceRetained
from .scheduling import Scheduler, ThreadedScheduler
from .watcher import RefWatcher

_logger = get_logger(__name__)

# Global state for the default watcher
_refwatch_state = {
    'is_installed': False,
    'config': None,
    'ref_watcher': None,
    'scheduler': None,
    'owns_scheduler': False,
    'install_time': 0.0,
    'lock': threading.RLock(),
}


def _is_enabled() -> bool:
    config = _refwatch_state['config']
    return _refwatch_state['is_installed'] and config is not None and config.is_enabled()


def _log_retained_reference(reference: KeyedWeakReference) -> None:
    """Listener used when the host does not supply one."""
    watcher = _refwatch_state['ref_watcher']
    label = f"{reference.class_name} named {reference.name}" if reference.name else reference.class_name
    retained = len(watcher.retained_keys) if watcher is not None else 1
    _logger.warning(f"Instance of {label} (key {reference.key}) is still reachable "
                    f"after its grace period; {retained} retained in total")


def install(config: Optional[RefWatchConfig] = None,
            on_reference_retained: Optional[OnReferenceRetained] = None,
            scheduler: Optional[Scheduler] = None,
            clock: Optional[Clock] = None) -> RefWatcher:
    """
    Install the process-wide watcher.

    Args:
        config: Configuration; falls back to the one set by configure(),
            then to the environment
        on_reference_retained: Called once per reference that outlives its
            grace period; defaults to logging a warning
        scheduler: Delayed executor; a dedicated thread is started when omitted
        clock: Uptime clock; monotonic by default

    Calling install() again returns the already installed watcher.
    """
    with _refwatch_state['lock']:
        if _refwatch_state['is_installed']:
            _logger.debug("RefWatch already installed")
            return _refwatch_state['ref_watcher']

        config = config or _refwatch_state['config'] or RefWatchConfig.from_env()
        set_log_level(config.log_level_value())

        owns_scheduler = scheduler is None
        if scheduler is None:
            scheduler = ThreadedScheduler(clock=clock)

        watcher = RefWatcher(
            clock=clock or UptimeClock(),
            check_retained_scheduler=scheduler,
            on_reference_retained=on_reference_retained or _log_retained_reference,
            is_enabled=_is_enabled,
            watch_duration_ms=config.watch_duration_ms,
        )

        _refwatch_state['config'] = config
        _refwatch_state['ref_watcher'] = watcher
        _refwatch_state['scheduler'] = scheduler
        _refwatch_state['owns_scheduler'] = owns_scheduler
        _refwatch_state['install_time'] = time.time()
        _refwatch_state['is_installed'] = True

        _logger.info(f"RefWatch installed with {config!r}")
        return watcher


def uninstall() -> None:
    """
    Drop the process-wide watcher and stop the scheduler thread it owns.

    Also forgets any configuration set by configure(), so the next
    install() starts from its argument or the environment.
    """
    with _refwatch_state['lock']:
        if not _refwatch_state['is_installed']:
            _refwatch_state['config'] = None
            return

        if _refwatch_state['owns_scheduler']:
            _refwatch_state['scheduler'].shutdown()
        _refwatch_state['ref_watcher'].clear_watched_references()

        _refwatch_state['is_installed'] = False
        _refwatch_state['config'] = None
        _refwatch_state['ref_watcher'] = None
        _refwatch_state['scheduler'] = None
        _refwatch_state['owns_scheduler'] = False
        _refwatch_state['install_time'] = 0.0

        _logger.info("RefWatch uninstalled")


def configure(**overrides: Any) -> RefWatchConfig:
    """
    Update the process configuration, e.g. configure(enabled=False).

    Takes effect on the next watch() call. Before install() the result is
    kept and used by install() when it is given no config.
    """
    with _refwatch_state['lock']:
        base = _refwatch_state['config'] or RefWatchConfig.from_env()
        config = base.merge(**overrides)
        set_log_level(config.log_level_value())
        _refwatch_state['config'] = config
        if _refwatch_state['is_installed']:
            _refwatch_state['ref_watcher'].watch_duration_ms = config.watch_duration_ms
        return config


def is_installed() -> bool:
    return _refwatch_state['is_installed']


def get_ref_watcher() -> Optional[RefWatcher]:
    return _refwatch_state['ref_watcher']


def watch(watched_reference: Any, reference_name: str = "") -> Optional[str]:
    """Watch an object with the process-wide watcher; ignored if not installed."""
    watcher = _refwatch_state['ref_watcher']
    if watcher is None:
        _logger.debug("watch() called before install(); ignoring")
        return None
    return watcher.watch(watched_reference, reference_name)


def get_report() -> RetentionReport:
    """Report of everything the process-wide watcher currently retains."""
    watcher = _refwatch_state['ref_watcher']
    if watcher is None:
        return create_report([])
    return watcher.create_report(get_memory_tracker())


def get_status() -> Dict[str, Any]:
    """Status of the process-wide watcher."""
    with _refwatch_state['lock']:
        config = _refwatch_state['config']
        watcher = _refwatch_state['ref_watcher']
        install_time = _refwatch_state['install_time']
        scheduler = _refwatch_state['scheduler']

        status = {
            'is_installed': _refwatch_state['is_installed'],
            'is_enabled': _is_enabled(),
            'uptime_seconds': time.time() - install_time if install_time else 0,
            'scheduler': type(scheduler).__name__ if scheduler is not None else None,
        }

        memory_tracker = get_memory_tracker()
        status['memory_current_mb'] = memory_tracker.get_rss_mb() if memory_tracker.is_available() else 0.0

        if config:
            status['configuration'] = {
                'enabled': config.enabled,
                'kill_switch': config.kill_switch,
                'watch_duration_ms': config.watch_duration_ms,
                'log_level': config.log_level,
            }

        if watcher is not None:
            status['stats'] = watcher.get_stats()

        return status


def _cleanup_on_exit():
    if _refwatch_state['is_installed']:
        uninstall()


atexit.register(_cleanup_on_exit)
