#=============================================================================
# File        : refwatch/memory.py
# Project     : RefWatch v1.0
# Component   : Memory - Process Memory Measurement
# Description : Process RSS readings attached to status and reports
#               • psutil provider (preferred)
#               • resource module fallback on Unix
#               • Null provider when no measurement is available
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, psutil, resource (fallback)
# Standards   : PEP 8, Type Hints, Cross-platform Compatibility
# Created     : 2025-08-19
# Modified    : 2025-10-19 (Split from sampling utilities)
# Dependencies: os, time, psutil, resource (fallback)
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import os
import time
from typing import Optional, Protocol, runtime_checkable

import psutil

from .logs import get_logger

_logger = get_logger(__name__)

_MB = 1024 * 1024


@runtime_checkable
class MemoryProvider(Protocol):
    """Protocol for memory measurement providers."""

    def get_rss_mb(self) -> float:
        """Get current RSS memory usage in MB."""
        ...


class PsutilProvider:
    """Memory provider using psutil (preferred)."""

    def __init__(self) -> None:
        self._process = psutil.Process(os.getpid())

    def get_rss_mb(self) -> float:
        try:
            return self._process.memory_info().rss / _MB
        except psutil.Error as e:
            _logger.debug(f"psutil memory read failed: {e}")
            return 0.0


class ResourceProvider:
    """Peak RSS from the resource module, for platforms psutil cannot read."""

    def get_rss_mb(self) -> float:
        import resource
        maxrss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # Heuristic: if > 1MB assume it's in bytes (macOS), else KB (Linux)
        if maxrss > _MB:
            return maxrss / _MB
        return maxrss / 1024


class NullProvider:
    """Null memory provider when no measurement is available."""

    def get_rss_mb(self) -> float:
        return 0.0


class MemoryTracker:
    """
    Process memory tracking with provider fallbacks.

    Selects the best available provider:
    1. psutil
    2. resource module (Unix)
    3. null provider (measurement disabled)
    """

    def __init__(self, provider: Optional[MemoryProvider] = None) -> None:
        self._provider = provider if provider is not None else self._detect_provider()
        self._last_measurement = 0.0
        self._measurement_cache = 0.0
        self._cache_duration = 0.1  # Cache for 100ms to reduce overhead

    @staticmethod
    def _detect_provider() -> MemoryProvider:
        try:
            provider = PsutilProvider()
            provider.get_rss_mb()
            return provider
        except psutil.Error as e:
            _logger.debug(f"psutil unavailable for this process: {e}")

        try:
            provider = ResourceProvider()
            if provider.get_rss_mb() > 0:
                return provider
        except ImportError:
            pass  # Windows has no resource module

        return NullProvider()

    def get_rss_mb(self) -> float:
        """Get current RSS memory usage in MB with caching."""
        now = time.monotonic()
        if now - self._last_measurement < self._cache_duration:
            return self._measurement_cache

        self._measurement_cache = self._provider.get_rss_mb()
        self._last_measurement = now
        return self._measurement_cache

    def is_available(self) -> bool:
        return not isinstance(self._provider, NullProvider)

    def get_provider_type(self) -> str:
        return type(self._provider).__name__


_default_tracker: Optional[MemoryTracker] = None


def get_memory_tracker() -> MemoryTracker:
    """Get the default global memory tracker instance."""
    global _default_tracker
    if _default_tracker is None:
        _default_tracker = MemoryTracker()
    return _default_tracker


def force_provider(provider: MemoryProvider) -> None:
    """Force a specific memory provider for testing (replaces global tracker)."""
    global _default_tracker
    _default_tracker = MemoryTracker(provider)


def reset_global_state() -> None:
    """Reset the global tracker (for testing)."""
    global _default_tracker
    _default_tracker = None
