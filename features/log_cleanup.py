"""LOGSMITH FILE PURPOSE
Purpose: purge log records not flagged do_not_delete (batch job + cron trigger + admin API).
Hot path: no (admin control-plane / cron only).
Feature flags:
  - LOGSMITH_FEATURE_LOG_CLEANUP
  - LOGSMITH_CLEANUP_ENABLED (cron tick only)
Failure mode:
  - unauthorized => 401
  - tick while disabled => 503
  - invalid cron string => 400
  - missing log settings / store errors => propagate (500)
"""

from __future__ import annotations

import os
from typing import Any, Iterator

from fastapi import APIRouter, Header, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from core.batch import BatchResult, Batchable, Schedulable, run_batch, schedule_job
from core.config import MAX_CLEANUP_CHUNK_SIZE, cleanup_chunk_size, env_flag
from core.context import ExecutionContext
from core.db import delete_log_records, iter_purgeable_log_ids, query_batch_jobs
from core.errors import InvalidCronSchedule
from core.logging import logger

router = APIRouter(prefix="/admin/log-cleanup", tags=["log-cleanup"])

JOB_NAME = "log_cleanup"


class LogCleanupBatch(Batchable):
    job_name = JOB_NAME

    def start(self, ctx: ExecutionContext) -> Iterator[str]:
        return iter_purgeable_log_ids(page_size=cleanup_chunk_size(), usage=ctx.usage)

    def execute(self, ctx: ExecutionContext, chunk: list[str]) -> None:
        delete_log_records(chunk, usage=ctx.usage)

    def finish(self, ctx: ExecutionContext, result: BatchResult) -> None:
        logger.info(
            "LOG_CLEANUP_DONE job_id=%s total=%s deleted_chunks=%s failed_chunks=%s",
            result.job_id,
            result.total_items,
            result.chunks_processed,
            result.chunks_failed,
        )


class LogCleanupSchedule(Schedulable):
    job_name = JOB_NAME

    def __init__(self, chunk_size: int | None = None) -> None:
        self.chunk_size = chunk_size

    def execute(self, ctx: ExecutionContext) -> BatchResult:
        return run_batch(LogCleanupBatch(), chunk_size=self.chunk_size)


def schedule_cleanup(ctx: ExecutionContext) -> dict[str, Any]:
    return schedule_job(LogCleanupSchedule(), ctx.settings().scheduler_cron_string)


def _admin_api_key() -> str | None:
    key = (os.getenv("LOGSMITH_ADMIN_API_KEY") or "").strip()
    return key or None


def _authorized(auth_header: str | None) -> bool:
    configured = _admin_api_key()
    if configured is None or not isinstance(auth_header, str):
        return False
    prefix = "Bearer "
    if not auth_header.startswith(prefix):
        return False
    token = auth_header[len(prefix) :].strip()
    return token == configured


def _require_admin_bearer(authorization: str | None) -> None:
    if not _authorized(authorization):
        raise HTTPException(status_code=401, detail="unauthorized")


def _ensure_runtime_enabled() -> None:
    if not env_flag("LOGSMITH_CLEANUP_ENABLED", "0"):
        raise HTTPException(status_code=503, detail="log cleanup disabled")


class RunRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    chunk_size: int | None = Field(default=None, ge=1, le=MAX_CLEANUP_CHUNK_SIZE)


@router.post("/run")
async def cleanup_run(body: RunRequest | None = None, authorization: str | None = Header(default=None)) -> dict[str, Any]:
    _require_admin_bearer(authorization)
    chunk_size = body.chunk_size if body is not None else None
    result = run_batch(LogCleanupBatch(), chunk_size=chunk_size)
    return {"ok": True, "job": result.as_dict()}


@router.post("/tick")
async def cleanup_tick(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    _require_admin_bearer(authorization)
    _ensure_runtime_enabled()
    result = LogCleanupSchedule().execute(ExecutionContext())
    return {"ok": True, "job": result.as_dict()}


@router.post("/schedule")
async def cleanup_schedule(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    _require_admin_bearer(authorization)
    try:
        scheduled = schedule_cleanup(ExecutionContext())
    except InvalidCronSchedule as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"ok": True, "scheduled": scheduled}


@router.get("/jobs")
async def cleanup_jobs(
    limit: int = Query(20, ge=1, le=500),
    authorization: str | None = Header(default=None),
) -> dict[str, Any]:
    _require_admin_bearer(authorization)
    return {"ok": True, "jobs": query_batch_jobs(job_name=JOB_NAME, limit=limit)}


FEATURE = {
    "key": "log_cleanup",
    "router": router,
    "enabled_env": "LOGSMITH_FEATURE_LOG_CLEANUP",
}
