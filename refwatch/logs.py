#=============================================================================
# File        : refwatch/logs.py
# Project     : RefWatch v1.0
# Component   : Logging - Safe Logger Defaults
# Description : Module loggers with safe defaults shared by every component
#               • WARN/ERROR only unless configured otherwise
#               • Console handler only when the host has none
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, logging
# Standards   : PEP 8, Type Hints
# Created     : 2025-08-19
# Modified    : 2025-10-19 (Extracted shared logger setup)
# Dependencies: logging
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import logging

LOG_FORMAT = '[RefWatch] %(levelname)s: %(message)s'

_configured_loggers = {}


def get_logger(name: str) -> logging.Logger:
    """Return a module logger at WARNING with a console handler if the host has none."""
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    logger.setLevel(logging.WARNING)  # Only WARN/ERROR by default

    # Add console handler only if none exists
    if not logger.handlers and not logging.getLogger().handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    _configured_loggers[name] = logger
    return logger


def set_log_level(level: int) -> None:
    """Apply a level to every RefWatch logger created so far."""
    logging.getLogger("refwatch").setLevel(level)
    for logger in _configured_loggers.values():
        logger.setLevel(level)
