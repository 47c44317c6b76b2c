"""LOGSMITH FILE PURPOSE
Purpose: HTTP entry for client apps to report errors and performance measurements.
Hot path: yes (called from client error handlers and timers).
Feature flags: LOGSMITH_FEATURE_APP_LOGS.
Failure mode:
  - unauthorized => 401
  - missing log settings / store errors => propagate (500); no fallback sink
"""

from __future__ import annotations

import os
from typing import Any

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from core.context import ExecutionContext
from core.logger_factory import ErrorLoggerFactory, PerformanceLoggerFactory
from core.loggers import Logger, PersistedLogger

router = APIRouter(prefix="/logs", tags=["app-logs"])


class ClientReportedError(Exception):
    """An error raised in a client app, reported over HTTP."""


def _app_api_key() -> str | None:
    key = os.getenv("LOGSMITH_APP_API_KEY", "").strip()
    return key or None


def _authorized(auth_header: str | None) -> bool:
    configured = _app_api_key()
    if not configured:
        return False
    if not isinstance(auth_header, str):
        return False
    prefix = "Bearer "
    if not auth_header.startswith(prefix):
        return False
    token = auth_header[len(prefix) :].strip()
    return token == configured


def _require_app_bearer(authorization: str | None) -> None:
    if not _authorized(authorization):
        raise HTTPException(status_code=401, detail="unauthorized")


class ErrorLogRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    message: str = Field(min_length=1, max_length=32768)
    stack_trace: str | None = Field(default=None, max_length=131072)


class PerformanceLogRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    raw_duration: int | None = None
    stack_trace: str | None = Field(default=None, max_length=131072)


def _emit(log: Logger, stack_trace: str | None) -> bool:
    if stack_trace is not None:
        log.set_stack_trace(stack_trace)
    log.log()
    return isinstance(log, PersistedLogger)


@router.post("/error")
async def log_error(body: ErrorLogRequest, authorization: str | None = Header(default=None)) -> dict[str, Any]:
    _require_app_bearer(authorization)
    factory = ErrorLoggerFactory(ClientReportedError(body.message), ctx=ExecutionContext())
    persisted = _emit(factory.get_logger(), body.stack_trace)
    return {"ok": True, "persisted": persisted}


@router.post("/performance")
async def log_performance(body: PerformanceLogRequest, authorization: str | None = Header(default=None)) -> dict[str, Any]:
    _require_app_bearer(authorization)
    factory = PerformanceLoggerFactory(body.raw_duration, ctx=ExecutionContext())
    persisted = _emit(factory.get_logger(), body.stack_trace)
    return {"ok": True, "persisted": persisted}


FEATURE = {
    "key": "app_logs",
    "router": router,
    "enabled_env": "LOGSMITH_FEATURE_APP_LOGS",
}
