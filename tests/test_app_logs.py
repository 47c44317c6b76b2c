from __future__ import annotations

import json
import logging

from fastapi.testclient import TestClient

from core.app import create_app
from core.db import insert_log_settings, query_log_records


def _set_env(monkeypatch, db_path: str, *, errors: bool, performance: bool) -> None:
    monkeypatch.setenv("LOGSMITH_DB_PATH", db_path)
    monkeypatch.setenv("LOGSMITH_FEATURE_APP_LOGS", "1")
    monkeypatch.setenv("LOGSMITH_APP_API_KEY", "app-secret")
    insert_log_settings("Default", enable_error_logging=errors, enable_performance_logging=performance)


def _auth() -> dict[str, str]:
    return {"Authorization": "Bearer app-secret"}


def test_app_logs_requires_bearer(monkeypatch, tmp_path) -> None:
    _set_env(monkeypatch, str(tmp_path / "auth.sqlite3"), errors=True, performance=True)
    client = TestClient(create_app())

    missing = client.post("/logs/error", json={"message": "boom"})
    assert missing.status_code == 401

    wrong = client.post("/logs/error", json={"message": "boom"}, headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401


def test_app_logs_feature_disabled_by_default(monkeypatch, tmp_path) -> None:
    _set_env(monkeypatch, str(tmp_path / "disabled.sqlite3"), errors=True, performance=True)
    monkeypatch.delenv("LOGSMITH_FEATURE_APP_LOGS")
    client = TestClient(create_app())
    assert client.post("/logs/error", json={"message": "boom"}, headers=_auth()).status_code == 404


def test_error_report_persisted_with_client_trace(monkeypatch, tmp_path) -> None:
    _set_env(monkeypatch, str(tmp_path / "error_on.sqlite3"), errors=True, performance=False)
    client = TestClient(create_app())

    resp = client.post(
        "/logs/error",
        json={"message": "boom", "stack_trace": "at app.js:10"},
        headers=_auth(),
    )

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "persisted": True}
    rows = query_log_records()
    assert len(rows) == 1
    assert rows[0]["message"] == "boom"
    assert rows[0]["stack_trace"] == "at app.js:10"


def test_error_report_traced_when_disabled(monkeypatch, tmp_path, caplog) -> None:
    _set_env(monkeypatch, str(tmp_path / "error_off.sqlite3"), errors=False, performance=False)
    caplog.set_level(logging.DEBUG, logger="logsmith.trace")
    client = TestClient(create_app())

    resp = client.post("/logs/error", json={"message": "boom"}, headers=_auth())

    assert resp.status_code == 200
    assert resp.json()["persisted"] is False
    assert query_log_records() == []
    lines = [r for r in caplog.records if r.name == "logsmith.trace"]
    assert len(lines) == 1
    assert lines[0].levelno == logging.ERROR
    assert lines[0].getMessage().startswith("boom\nAt: ")


def test_performance_report_persisted(monkeypatch, tmp_path) -> None:
    _set_env(monkeypatch, str(tmp_path / "perf_on.sqlite3"), errors=False, performance=True)
    client = TestClient(create_app())

    resp = client.post("/logs/performance", json={"raw_duration": 830}, headers=_auth())

    assert resp.status_code == 200
    assert resp.json()["persisted"] is True
    rows = query_log_records()
    assert len(rows) == 1
    assert json.loads(rows[0]["message"])["raw_duration"] == 830


def test_performance_report_rejects_unknown_fields(monkeypatch, tmp_path) -> None:
    _set_env(monkeypatch, str(tmp_path / "perf_invalid.sqlite3"), errors=False, performance=True)
    client = TestClient(create_app())
    resp = client.post("/logs/performance", json={"duration_ms": 1}, headers=_auth())
    assert resp.status_code == 422


def test_root_lists_enabled_features(monkeypatch, tmp_path) -> None:
    _set_env(monkeypatch, str(tmp_path / "root.sqlite3"), errors=False, performance=False)
    monkeypatch.setenv("LOGSMITH_FEATURE_LOG_CLEANUP", "0")
    client = TestClient(create_app())
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "features": ["app_logs"], "discovered": ["app_logs", "log_cleanup"]}
