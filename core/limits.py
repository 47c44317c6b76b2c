"""LOGSMITH FILE PURPOSE
Purpose: per-execution resource usage counters (queries, rows, DML, CPU, heap).
Hot path: yes (counter bumps on every store call made with a context).
Feature flags: none.
Failure mode: counters are advisory; they never block a store call.
"""

from __future__ import annotations

from dataclasses import dataclass

import psutil


@dataclass
class UsageCounters:
    query_count: int = 0
    query_rows: int = 0
    dml_statements: int = 0
    dml_rows: int = 0

    def count_query(self, rows: int) -> None:
        self.query_count += 1
        self.query_rows += int(rows)

    def count_dml(self, rows: int) -> None:
        self.dml_statements += 1
        self.dml_rows += int(rows)


def process_cpu_ms() -> int:
    times = psutil.Process().cpu_times()
    return int((times.user + times.system) * 1000)


def process_heap_bytes() -> int:
    return int(psutil.Process().memory_info().rss)
