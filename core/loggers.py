"""LOGSMITH FILE PURPOSE
Purpose: logger variants: transient debug lines vs persisted error/performance records.
Hot path: yes (called from application code on every log call).
Feature flags: none (factories decide which variant to build).
Failure mode: construction errors and store errors propagate to the caller.
"""

from __future__ import annotations

import abc
import json
import os
import traceback
from dataclasses import dataclass
from typing import Any

from core.context import ExecutionContext
from core.db import insert_log_record
from core.errors import MissingError, MissingLoggingLevel
from core.logging import LoggingLevel, emit_trace

_THIS_FILE = os.path.normcase(os.path.abspath(__file__))


def _is_internal(frame: traceback.FrameSummary) -> bool:
    return os.path.normcase(os.path.abspath(frame.filename)) == _THIS_FILE


def format_current_stack() -> str:
    frames = [f for f in traceback.extract_stack() if not _is_internal(f)]
    return "".join(traceback.format_list(frames))


def format_error_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


@dataclass(frozen=True)
class LogRecord:
    message: str
    stack_trace: str
    do_not_delete: bool = False


class Logger(abc.ABC):
    def __init__(self) -> None:
        self.stack_trace: str | None = None

    def set_stack_trace(self, trace: str) -> Logger:
        self.stack_trace = trace
        return self

    def resolve_stack_trace(self) -> str:
        if self.stack_trace is not None:
            return self.stack_trace
        return format_current_stack()

    @abc.abstractmethod
    def log(self) -> None:
        raise NotImplementedError


class DebugLogger(Logger):
    def __init__(self, level: LoggingLevel | None, message: Any) -> None:
        super().__init__()
        if level is None:
            raise MissingLoggingLevel()
        self.level = LoggingLevel(level)
        self.message = message

    def log(self) -> None:
        emit_trace(self.level, f"{self.message}\nAt: {self.resolve_stack_trace()}")


class PersistedLogger(Logger):
    def __init__(self, ctx: ExecutionContext) -> None:
        super().__init__()
        self.ctx = ctx

    @abc.abstractmethod
    def to_record(self) -> LogRecord:
        raise NotImplementedError

    def log(self) -> None:
        record = self.to_record()
        insert_log_record(
            message=record.message,
            stack_trace=record.stack_trace,
            do_not_delete=record.do_not_delete,
            usage=self.ctx.usage,
        )


class ErrorLogger(PersistedLogger):
    def __init__(self, ctx: ExecutionContext, error: BaseException | None) -> None:
        super().__init__(ctx)
        if error is None:
            raise MissingError()
        self.error = error

    def to_record(self) -> LogRecord:
        trace = self.stack_trace if self.stack_trace is not None else format_error_stack(self.error)
        return LogRecord(message=str(self.error), stack_trace=trace)


class PerformanceLogger(PersistedLogger):
    def __init__(self, ctx: ExecutionContext, raw_duration: int | None = None) -> None:
        super().__init__(ctx)
        self.raw_duration = raw_duration

    def to_record(self) -> LogRecord:
        snapshot = self.ctx.limits_snapshot(self.raw_duration)
        return LogRecord(
            message=json.dumps(snapshot, sort_keys=True, separators=(",", ":")),
            stack_trace=self.resolve_stack_trace(),
        )
