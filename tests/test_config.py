#=============================================================================
# File        : tests/test_config.py
# Project     : RefWatch v1.0
# Component   : Configuration Test Suite
# Description : Validation, environment overrides and the enable gate
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Created     : 2025-10-19
#=============================================================================

import logging
import sys
from pathlib import Path

import pytest

# Add refwatch to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent))

from refwatch.config import DEFAULT_WATCH_DURATION_MS, RefWatchConfig


def test_defaults():
    config = RefWatchConfig()
    assert config.enabled is True
    assert config.watch_duration_ms == DEFAULT_WATCH_DURATION_MS == 5000
    assert config.is_enabled() is True
    assert config.log_level_value() == logging.WARNING


def test_kill_switch_overrides_enabled():
    assert RefWatchConfig(kill_switch=True).is_enabled() is False
    assert RefWatchConfig(enabled=False).is_enabled() is False


def test_validation():
    with pytest.raises(ValueError):
        RefWatchConfig(watch_duration_ms=-1)
    with pytest.raises(TypeError):
        RefWatchConfig(watch_duration_ms=1.5)
    with pytest.raises(TypeError):
        RefWatchConfig(watch_duration_ms=True)
    with pytest.raises(ValueError):
        RefWatchConfig(log_level="chatty")


def test_log_level_normalized():
    assert RefWatchConfig(log_level=" debug ").log_level == "DEBUG"


def test_from_env(monkeypatch):
    monkeypatch.setenv("REFWATCH_ENABLED", "0")
    monkeypatch.setenv("REFWATCH_WATCH_DURATION_MS", "750")
    monkeypatch.setenv("REFWATCH_LOG_LEVEL", "info")
    config = RefWatchConfig.from_env()
    assert config.enabled is False
    assert config.watch_duration_ms == 750
    assert config.log_level == "INFO"


def test_from_env_ignores_garbage(monkeypatch):
    monkeypatch.setenv("REFWATCH_WATCH_DURATION_MS", "soon")
    base = RefWatchConfig(watch_duration_ms=100)
    assert RefWatchConfig.from_env(base).watch_duration_ms == 100


def test_from_env_kill_switch(monkeypatch):
    monkeypatch.setenv("REFWATCH_KILL_SWITCH", "yes")
    assert RefWatchConfig.from_env().is_enabled() is False


def test_merge_is_immutable():
    config = RefWatchConfig()
    merged = config.merge(enabled=False)
    assert config.enabled is True
    assert merged.enabled is False
    with pytest.raises(Exception):
        config.enabled = False


def test_repr():
    assert "watch_duration_ms=5000" in repr(RefWatchConfig())
