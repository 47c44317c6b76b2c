"""LOGSMITH FILE PURPOSE
Purpose: factories choosing a persisted vs debug logger from the stored settings flags.
Hot path: yes (one settings read per execution context, then cached).
Feature flags: log_settings.enable_error_logging, log_settings.enable_performance_logging.
Failure mode: missing/ambiguous settings => ConfigurationMissing (uncaught).
"""

from __future__ import annotations

import abc

from core.context import ExecutionContext
from core.loggers import DebugLogger, ErrorLogger, Logger, PerformanceLogger, PersistedLogger
from core.logging import LoggingLevel


class LoggerFactory(abc.ABC):
    def __init__(self, ctx: ExecutionContext | None = None) -> None:
        self.ctx = ctx if ctx is not None else ExecutionContext()

    def get_logger(self) -> Logger:
        if self.is_enabled():
            return self.get_persisted_logger()
        return self.get_debug_logger()

    @abc.abstractmethod
    def is_enabled(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def get_persisted_logger(self) -> PersistedLogger:
        raise NotImplementedError

    @abc.abstractmethod
    def get_debug_logger(self) -> DebugLogger:
        raise NotImplementedError


class ErrorLoggerFactory(LoggerFactory):
    def __init__(self, error: BaseException | None, ctx: ExecutionContext | None = None) -> None:
        super().__init__(ctx)
        self.error = error

    def is_enabled(self) -> bool:
        return self.ctx.settings().enable_error_logging

    def get_persisted_logger(self) -> PersistedLogger:
        return ErrorLogger(self.ctx, self.error)

    def get_debug_logger(self) -> DebugLogger:
        return DebugLogger(LoggingLevel.ERROR, str(self.error))


class PerformanceLoggerFactory(LoggerFactory):
    def __init__(self, raw_duration: int | None = None, ctx: ExecutionContext | None = None) -> None:
        super().__init__(ctx)
        self.raw_duration = raw_duration

    def is_enabled(self) -> bool:
        return self.ctx.settings().enable_performance_logging

    def get_persisted_logger(self) -> PersistedLogger:
        return PerformanceLogger(self.ctx, self.raw_duration)

    def get_debug_logger(self) -> DebugLogger:
        return DebugLogger(LoggingLevel.INFO, str(self.raw_duration))
