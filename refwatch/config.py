#=============================================================================
# File        : refwatch/config.py
# Project     : RefWatch v1.0
# Component   : Configuration - RefWatch Configuration Dataclass
# Description : Watcher configuration with validation and env overrides
#               • Enable gate and kill-switch for the watch() entry point
#               • Grace period (watch duration) before a reference is retained
#               • Environment variable overrides for ops
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Dataclasses
# Standards   : PEP 8, Type Hints, Immutable Configuration
# Created     : 2025-08-19
# Modified    : 2025-10-19 (Reworked for reference watching)
# Dependencies: dataclasses, typing, os, logging
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_WATCH_DURATION_MS = 5000

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None: return default
    return v.strip().lower() in {"1", "true", "yes", "on"}

def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None: return default
    try:
        return int(v)
    except ValueError:
        return default


@dataclass(frozen=True)
class RefWatchConfig:
    """
    RefWatch runtime configuration.

    Safety defaults:
      - watching enabled
      - 5 second grace period
      - WARNING log level
    """
    enabled: bool = True
    watch_duration_ms: int = DEFAULT_WATCH_DURATION_MS
    kill_switch: bool = False  # hard-off (e.g., REFWATCH_KILL_SWITCH=1)
    log_level: str = "WARNING"

    def __post_init__(self):
        if isinstance(self.watch_duration_ms, bool) or not isinstance(self.watch_duration_ms, int):
            raise TypeError(f"watch_duration_ms must be an int, got {type(self.watch_duration_ms).__name__}")
        if self.watch_duration_ms < 0:
            raise ValueError(f"watch_duration_ms cannot be negative, got {self.watch_duration_ms}")

        level = str(self.log_level).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{self.log_level}'")

        # Apply normalized values into frozen dataclass
        object.__setattr__(self, "log_level", level)

    # --------- Factory helpers ---------

    @staticmethod
    def from_env(base: Optional["RefWatchConfig"] = None) -> "RefWatchConfig":
        """
        Build config from environment variables, overlaying a base config.
        Supported envs:
          REFWATCH_ENABLED (0|1)
          REFWATCH_WATCH_DURATION_MS
          REFWATCH_KILL_SWITCH (0|1)
          REFWATCH_LOG_LEVEL (DEBUG|INFO|WARNING|ERROR|CRITICAL)
        """
        base = base or RefWatchConfig()
        return replace(
            base,
            enabled=_env_bool("REFWATCH_ENABLED", base.enabled),
            watch_duration_ms=_env_int("REFWATCH_WATCH_DURATION_MS", base.watch_duration_ms),
            kill_switch=_env_bool("REFWATCH_KILL_SWITCH", base.kill_switch),
            log_level=(os.getenv("REFWATCH_LOG_LEVEL", base.log_level) or base.log_level),
        )

    def merge(self, **overrides) -> "RefWatchConfig":
        """Return a copy with provided fields overridden (immutably)."""
        return replace(self, **overrides)

    # --------- Convenience getters ---------

    def is_enabled(self) -> bool:
        return self.enabled and not self.kill_switch

    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    def __repr__(self) -> str:
        return (f"RefWatchConfig(enabled={self.enabled}, "
                f"watch_duration_ms={self.watch_duration_ms}, "
                f"kill_switch={self.kill_switch}, log_level='{self.log_level}')")
