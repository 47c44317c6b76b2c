"""LOGSMITH FILE PURPOSE
Purpose: chunked batch runner + cron schedule registry for background jobs.
Hot path: no (admin/cron-triggered only).
Feature flags: LOGSMITH_CLEANUP_CHUNK_SIZE.
Failure mode:
  - start()/paging/finish() failure => job marked failed, exception re-raised
  - chunk failure => that chunk aborted, counted in the job record; remaining chunks still run
"""

from __future__ import annotations

import abc
import itertools
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from core.config import cleanup_chunk_size
from core.context import ExecutionContext
from core.db import complete_batch_job, create_batch_job, upsert_scheduled_job
from core.errors import InvalidCronSchedule
from core.logging import logger

_CRON_FIELD_RE = re.compile(r"^[0-9A-Za-z*?/,#\-]+$")


@dataclass
class BatchResult:
    job_id: str
    job_name: str
    status: str = "processing"
    total_items: int = 0
    chunks_processed: int = 0
    chunks_failed: int = 0
    items_processed: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "job_name": self.job_name,
            "status": self.status,
            "total_items": self.total_items,
            "chunks_processed": self.chunks_processed,
            "chunks_failed": self.chunks_failed,
            "items_processed": self.items_processed,
            "errors": list(self.errors),
        }


class Batchable(abc.ABC):
    job_name: str = "batch"

    @abc.abstractmethod
    def start(self, ctx: ExecutionContext) -> Iterable[Any]:
        raise NotImplementedError

    @abc.abstractmethod
    def execute(self, ctx: ExecutionContext, chunk: list[Any]) -> None:
        raise NotImplementedError

    def finish(self, ctx: ExecutionContext, result: BatchResult) -> None:
        return None


class Schedulable(abc.ABC):
    job_name: str = "scheduled"

    @abc.abstractmethod
    def execute(self, ctx: ExecutionContext) -> Any:
        raise NotImplementedError


def _persist(result: BatchResult) -> None:
    complete_batch_job(
        job_id=result.job_id,
        status=result.status,
        total_items=result.total_items,
        chunks_processed=result.chunks_processed,
        chunks_failed=result.chunks_failed,
        items_processed=result.items_processed,
        errors=result.errors,
    )


def _fail(result: BatchResult, e: Exception) -> None:
    result.status = "failed"
    result.errors.append(f"{type(e).__name__}: {e}")
    _persist(result)


def run_batch(batch: Batchable, chunk_size: int | None = None) -> BatchResult:
    size = chunk_size if chunk_size is not None else cleanup_chunk_size()
    if size < 1:
        raise ValueError("chunk_size must be >= 1")

    result = BatchResult(job_id=create_batch_job(batch.job_name), job_name=batch.job_name)

    try:
        items = iter(batch.start(ExecutionContext()))
    except Exception as e:
        _fail(result, e)
        raise

    offset = 0
    while True:
        # start() may page lazily; a paging error fails the whole job like start()
        try:
            chunk = list(itertools.islice(items, size))
        except Exception as e:
            _fail(result, e)
            raise
        if not chunk:
            break
        result.total_items += len(chunk)
        try:
            batch.execute(ExecutionContext(), chunk)
        except Exception as e:
            result.chunks_failed += 1
            result.errors.append(f"{type(e).__name__}: {e}")
            logger.warning(
                "BATCH_CHUNK_FAILED job=%s job_id=%s offset=%s error=%s", batch.job_name, result.job_id, offset, e
            )
        else:
            result.chunks_processed += 1
            result.items_processed += len(chunk)
        offset += len(chunk)

    result.status = "completed"
    try:
        batch.finish(ExecutionContext(), result)
    except Exception as e:
        _fail(result, e)
        raise
    _persist(result)
    return result


def validate_cron(cron_string: str) -> str:
    """Check a platform cron expression.

    Six or seven whitespace-separated fields: seconds, minutes, hours,
    day-of-month, month, day-of-week and an optional year.
    """
    if not isinstance(cron_string, str):
        raise InvalidCronSchedule("cron string is required")
    fields = cron_string.split()
    if len(fields) not in (6, 7):
        raise InvalidCronSchedule(f"cron string must have 6 or 7 fields, got {len(fields)}: {cron_string!r}")
    for f in fields:
        if not _CRON_FIELD_RE.match(f):
            raise InvalidCronSchedule(f"invalid cron field {f!r} in {cron_string!r}")
    return " ".join(fields)


def schedule_job(job: Schedulable, cron_string: str, job_name: str | None = None) -> dict[str, Any]:
    cron = validate_cron(cron_string)
    name = job_name or job.job_name
    scheduled = upsert_scheduled_job(job_name=name, cron_string=cron, job_key=job.job_name)
    logger.info("JOB_SCHEDULED job=%s cron=%s", name, cron)
    return scheduled
