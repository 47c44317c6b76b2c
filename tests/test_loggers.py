from __future__ import annotations

import json
import logging

import pytest

from core.context import ExecutionContext
from core.db import insert_log_settings, query_log_records
from core.errors import MissingError, MissingLoggingLevel
from core.loggers import DebugLogger, ErrorLogger, PerformanceLogger, format_error_stack
from core.logging import LoggingLevel

PERFORMANCE_KEYS = {
    "query_count",
    "query_rows",
    "dml_statements",
    "dml_rows",
    "cpu_time_ms",
    "heap_size_bytes",
    "raw_duration",
}


def _raised(message: str) -> RuntimeError:
    try:
        raise RuntimeError(message)
    except RuntimeError as e:
        return e


def _build_debug_logger(message: str) -> DebugLogger:
    return DebugLogger(LoggingLevel.WARN, message)


def test_debug_logger_requires_level() -> None:
    with pytest.raises(MissingLoggingLevel):
        DebugLogger(None, "msg")


def test_error_logger_requires_error(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOGSMITH_DB_PATH", str(tmp_path / "missing_error.sqlite3"))
    with pytest.raises(MissingError):
        ErrorLogger(ExecutionContext(), None)


def test_set_stack_trace_is_fluent() -> None:
    log = DebugLogger(LoggingLevel.INFO, "x")
    assert log.set_stack_trace("custom") is log
    assert log.resolve_stack_trace() == "custom"


def test_debug_logger_emits_message_and_explicit_trace(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="logsmith.trace")
    DebugLogger(LoggingLevel.DEBUG, "hello").set_stack_trace("frame-a\nframe-b").log()

    records = [r for r in caplog.records if r.name == "logsmith.trace"]
    assert len(records) == 1
    assert records[0].levelno == logging.DEBUG
    assert records[0].getMessage() == "hello\nAt: frame-a\nframe-b"


def test_debug_logger_supports_fine_levels(caplog) -> None:
    caplog.set_level(1, logger="logsmith.trace")
    DebugLogger(LoggingLevel.FINEST, "deep").log()

    records = [r for r in caplog.records if r.name == "logsmith.trace"]
    assert len(records) == 1
    assert records[0].levelname == "FINEST"


def test_captured_trace_reflects_log_call_site(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="logsmith.trace")
    log = _build_debug_logger("where")
    log.log()

    text = [r for r in caplog.records if r.name == "logsmith.trace"][0].getMessage()
    trace = text.split("\nAt: ", 1)[1]
    assert "test_captured_trace_reflects_log_call_site" in trace
    assert "_build_debug_logger" not in trace
    assert "core/loggers.py" not in trace.replace("\\", "/")


def test_error_logger_record_round_trips_error(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOGSMITH_DB_PATH", str(tmp_path / "error_record.sqlite3"))
    err = _raised("kaput")

    record = ErrorLogger(ExecutionContext(), err).to_record()

    assert record.message == "kaput"
    assert record.stack_trace == format_error_stack(err)
    assert "_raised" in record.stack_trace
    assert record.do_not_delete is False


def test_error_logger_prefers_explicit_trace(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOGSMITH_DB_PATH", str(tmp_path / "error_override.sqlite3"))
    ctx = ExecutionContext()
    ErrorLogger(ctx, _raised("kaput")).set_stack_trace("verbatim trace").log()

    rows = query_log_records()
    assert len(rows) == 1
    assert rows[0]["message"] == "kaput"
    assert rows[0]["stack_trace"] == "verbatim trace"
    assert ctx.usage.dml_statements == 1


def test_performance_logger_payload_has_exactly_seven_keys(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOGSMITH_DB_PATH", str(tmp_path / "perf_keys.sqlite3"))
    insert_log_settings("Default", enable_performance_logging=True)
    ctx = ExecutionContext()
    ctx.settings()

    payload = json.loads(PerformanceLogger(ctx, 1234).to_record().message)

    assert set(payload) == PERFORMANCE_KEYS
    assert payload["raw_duration"] == 1234
    assert payload["query_count"] == 1
    assert payload["query_rows"] == 1
    assert payload["dml_statements"] == 0
    assert payload["heap_size_bytes"] > 0
    assert payload["cpu_time_ms"] >= 0


def test_performance_logger_without_duration_persists_null(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOGSMITH_DB_PATH", str(tmp_path / "perf_null.sqlite3"))
    PerformanceLogger(ExecutionContext()).log()

    rows = query_log_records()
    assert len(rows) == 1
    payload = json.loads(rows[0]["message"])
    assert set(payload) == PERFORMANCE_KEYS
    assert payload["raw_duration"] is None
    assert "test_performance_logger_without_duration_persists_null" in rows[0]["stack_trace"]


def test_performance_logger_uses_explicit_trace(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOGSMITH_DB_PATH", str(tmp_path / "perf_trace.sqlite3"))
    PerformanceLogger(ExecutionContext(), 7).set_stack_trace("t").log()

    rows = query_log_records()
    assert rows[0]["stack_trace"] == "t"
