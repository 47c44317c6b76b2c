"""LOGSMITH FILE PURPOSE
Purpose: explicit per-unit-of-work execution context (cached log settings + usage counters).
Hot path: yes (created once per request/job chunk; settings fetched lazily once).
Feature flags: LOGSMITH_SETTINGS_NAME.
Failure mode: missing/ambiguous settings => ConfigurationMissing (uncaught).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.config import settings_name
from core.db import fetch_log_settings
from core.errors import ConfigurationMissing
from core.limits import UsageCounters, process_cpu_ms, process_heap_bytes


@dataclass(frozen=True)
class LogSettings:
    name: str
    enable_error_logging: bool
    enable_performance_logging: bool
    scheduler_cron_string: str


class ExecutionContext:
    """One unit of work: a request, a CLI run or a single batch chunk.

    Settings are read at most once per context and never refreshed; open a new
    context to observe changed settings. Store calls made with ``ctx.usage``
    are counted against this context only.
    """

    def __init__(self, settings_name_override: str | None = None) -> None:
        self.settings_name = settings_name_override or settings_name()
        self.usage = UsageCounters()
        self._settings: LogSettings | None = None
        self._cpu_start_ms = process_cpu_ms()

    def settings(self) -> LogSettings:
        if self._settings is None:
            rows = fetch_log_settings(self.settings_name, usage=self.usage)
            if len(rows) != 1:
                raise ConfigurationMissing(self.settings_name, len(rows))
            row = rows[0]
            self._settings = LogSettings(
                name=row["name"],
                enable_error_logging=row["enable_error_logging"],
                enable_performance_logging=row["enable_performance_logging"],
                scheduler_cron_string=row["scheduler_cron_string"],
            )
        return self._settings

    def cpu_time_ms(self) -> int:
        return max(0, process_cpu_ms() - self._cpu_start_ms)

    def limits_snapshot(self, raw_duration: int | None = None) -> dict[str, Any]:
        return {
            "query_count": self.usage.query_count,
            "query_rows": self.usage.query_rows,
            "dml_statements": self.usage.dml_statements,
            "dml_rows": self.usage.dml_rows,
            "cpu_time_ms": self.cpu_time_ms(),
            "heap_size_bytes": process_heap_bytes(),
            "raw_duration": raw_duration,
        }
