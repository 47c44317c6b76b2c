"""LOGSMITH FILE PURPOSE
Purpose: logging setup with strict debug gating, plus the transient trace sink.
Hot path: yes (logger calls occur in hot paths; default is quiet).
Feature flags: LOGSMITH_DEBUG.
Failure mode: never crash due to logging.
"""

from __future__ import annotations

import enum
import logging

from core.config import is_debug

FINE = 8
FINER = 6
FINEST = 4

logging.addLevelName(FINE, "FINE")
logging.addLevelName(FINER, "FINER")
logging.addLevelName(FINEST, "FINEST")


class LoggingLevel(enum.IntEnum):
    ERROR = logging.ERROR
    WARN = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG
    FINE = FINE
    FINER = FINER
    FINEST = FINEST


def _configure() -> logging.Logger:
    logger = logging.getLogger("logsmith")
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO if is_debug() else logging.WARNING)
    return logger


logger = _configure()
trace_logger = logger.getChild("trace")


def emit_trace(level: LoggingLevel, text: str) -> None:
    # ephemeral: whatever the handlers drop is gone
    trace_logger.log(int(level), text)
