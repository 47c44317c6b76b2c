"""LOGSMITH FILE PURPOSE
Purpose: SQLite record store for log settings, log records and batch/scheduled jobs.
Hot path: no (durable persistence path; explicit calls only).
Feature flags: none.
Failure mode: deterministic exceptions; caller controls retry/rollback behavior.
"""

from __future__ import annotations

import json
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any, Iterator

from core.config import db_path
from core.limits import UsageCounters


def _validate_required(value: str, name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} is required")


def init_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS log_settings (
            settings_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            enable_error_logging INTEGER NOT NULL DEFAULT 0,
            enable_performance_logging INTEGER NOT NULL DEFAULT 0,
            scheduler_cron_string TEXT NOT NULL DEFAULT ''
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS log_records (
            log_id TEXT PRIMARY KEY,
            message TEXT NOT NULL,
            stack_trace TEXT NOT NULL DEFAULT '',
            do_not_delete INTEGER NOT NULL DEFAULT 0,
            created_ts INTEGER NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS batch_jobs (
            job_id TEXT PRIMARY KEY,
            job_name TEXT NOT NULL,
            status TEXT NOT NULL,
            total_items INTEGER NOT NULL DEFAULT 0,
            chunks_processed INTEGER NOT NULL DEFAULT 0,
            chunks_failed INTEGER NOT NULL DEFAULT 0,
            items_processed INTEGER NOT NULL DEFAULT 0,
            errors_json TEXT NOT NULL DEFAULT '[]',
            created_ts INTEGER NOT NULL,
            completed_ts INTEGER
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS scheduled_jobs (
            job_name TEXT PRIMARY KEY,
            cron_string TEXT NOT NULL,
            job_key TEXT NOT NULL,
            created_ts INTEGER NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_log_settings_name ON log_settings(name)")
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_log_records_keep_ts ON log_records(do_not_delete, created_ts)"
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_batch_jobs_ts ON batch_jobs(created_ts)")
    conn.commit()


def get_conn(path: str | None = None) -> sqlite3.Connection:
    path = path or db_path()
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    init_schema(conn)
    return conn


def _row_to_settings(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "settings_id": int(row["settings_id"]),
        "name": str(row["name"]),
        "enable_error_logging": bool(row["enable_error_logging"]),
        "enable_performance_logging": bool(row["enable_performance_logging"]),
        "scheduler_cron_string": str(row["scheduler_cron_string"]),
    }


def insert_log_settings(
    name: str,
    enable_error_logging: bool = False,
    enable_performance_logging: bool = False,
    scheduler_cron_string: str = "",
) -> int:
    _validate_required(name, "name")
    with get_conn() as conn:
        cur = conn.execute(
            """
            INSERT INTO log_settings(
                name, enable_error_logging, enable_performance_logging, scheduler_cron_string
            ) VALUES (?, ?, ?, ?)
            """,
            (name, int(bool(enable_error_logging)), int(bool(enable_performance_logging)), scheduler_cron_string),
        )
        conn.commit()
        return int(cur.lastrowid)


def fetch_log_settings(name: str, usage: UsageCounters | None = None) -> list[dict[str, Any]]:
    _validate_required(name, "name")
    with get_conn() as conn:
        rows = conn.execute(
            """
            SELECT settings_id, name, enable_error_logging, enable_performance_logging, scheduler_cron_string
            FROM log_settings
            WHERE name = ?
            ORDER BY settings_id ASC
            LIMIT 2
            """,
            (name,),
        ).fetchall()
    if usage is not None:
        usage.count_query(len(rows))
    return [_row_to_settings(row) for row in rows]


def insert_log_record(
    message: str,
    stack_trace: str = "",
    do_not_delete: bool = False,
    usage: UsageCounters | None = None,
) -> str:
    if not isinstance(message, str):
        raise ValueError("message must be a str")
    if not isinstance(stack_trace, str):
        raise ValueError("stack_trace must be a str")

    log_id = str(uuid.uuid4())
    now_ts = int(time.time())
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO log_records(log_id, message, stack_trace, do_not_delete, created_ts)
            VALUES (?, ?, ?, ?, ?)
            """,
            (log_id, message, stack_trace, int(bool(do_not_delete)), now_ts),
        )
        conn.commit()
    if usage is not None:
        usage.count_dml(1)
    return log_id


def query_log_records(
    do_not_delete: bool | None = None,
    limit: int = 100,
    usage: UsageCounters | None = None,
) -> list[dict[str, Any]]:
    safe_limit = max(1, min(int(limit), 5000))

    query = """
        SELECT log_id, message, stack_trace, do_not_delete, created_ts
        FROM log_records
    """
    params: list[Any] = []
    if do_not_delete is not None:
        query += " WHERE do_not_delete = ?"
        params.append(int(bool(do_not_delete)))
    query += " ORDER BY created_ts ASC, log_id ASC LIMIT ?"
    params.append(safe_limit)

    with get_conn() as conn:
        rows = conn.execute(query, params).fetchall()
    if usage is not None:
        usage.count_query(len(rows))

    out: list[dict[str, Any]] = []
    for row in rows:
        out.append(
            {
                "log_id": str(row["log_id"]),
                "message": str(row["message"]),
                "stack_trace": str(row["stack_trace"]),
                "do_not_delete": bool(row["do_not_delete"]),
                "created_ts": int(row["created_ts"]),
            }
        )
    return out


def iter_purgeable_log_ids(page_size: int = 200, usage: UsageCounters | None = None) -> Iterator[str]:
    """Yield ids of log records not flagged do_not_delete, oldest first.

    Pages by (created_ts, log_id) keyset, one query per page, so the caller
    may delete already-yielded ids between pages.
    """
    safe_page = max(1, int(page_size))
    after: tuple[int, str] | None = None
    while True:
        query = """
            SELECT log_id, created_ts
            FROM log_records
            WHERE do_not_delete = 0
        """
        params: list[Any] = []
        if after is not None:
            query += " AND (created_ts > ? OR (created_ts = ? AND log_id > ?))"
            params.extend([after[0], after[0], after[1]])
        query += " ORDER BY created_ts ASC, log_id ASC LIMIT ?"
        params.append(safe_page)

        with get_conn() as conn:
            rows = conn.execute(query, params).fetchall()
        if usage is not None:
            usage.count_query(len(rows))
        for row in rows:
            yield str(row["log_id"])
        if len(rows) < safe_page:
            return
        after = (int(rows[-1]["created_ts"]), str(rows[-1]["log_id"]))


def delete_log_records(log_ids: list[str], usage: UsageCounters | None = None) -> int:
    if not log_ids:
        return 0
    placeholders = ",".join("?" for _ in log_ids)
    with get_conn() as conn:
        # do_not_delete is re-checked so a record flagged after paging survives
        cur = conn.execute(
            f"DELETE FROM log_records WHERE do_not_delete = 0 AND log_id IN ({placeholders})",
            list(log_ids),
        )
        conn.commit()
        deleted = int(cur.rowcount)
    if usage is not None:
        usage.count_dml(deleted)
    return deleted


def _row_to_batch_job(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "job_id": str(row["job_id"]),
        "job_name": str(row["job_name"]),
        "status": str(row["status"]),
        "total_items": int(row["total_items"]),
        "chunks_processed": int(row["chunks_processed"]),
        "chunks_failed": int(row["chunks_failed"]),
        "items_processed": int(row["items_processed"]),
        "errors": json.loads(str(row["errors_json"])),
        "created_ts": int(row["created_ts"]),
        "completed_ts": int(row["completed_ts"]) if row["completed_ts"] is not None else None,
    }


def create_batch_job(job_name: str) -> str:
    _validate_required(job_name, "job_name")
    job_id = str(uuid.uuid4())
    with get_conn() as conn:
        conn.execute(
            "INSERT INTO batch_jobs(job_id, job_name, status, created_ts) VALUES (?, ?, 'processing', ?)",
            (job_id, job_name, int(time.time())),
        )
        conn.commit()
    return job_id


def complete_batch_job(
    job_id: str,
    status: str,
    total_items: int,
    chunks_processed: int,
    chunks_failed: int,
    items_processed: int,
    errors: list[str],
) -> None:
    _validate_required(job_id, "job_id")
    with get_conn() as conn:
        conn.execute(
            """
            UPDATE batch_jobs
            SET status = ?, total_items = ?, chunks_processed = ?, chunks_failed = ?,
                items_processed = ?, errors_json = ?, completed_ts = ?
            WHERE job_id = ?
            """,
            (
                status,
                int(total_items),
                int(chunks_processed),
                int(chunks_failed),
                int(items_processed),
                json.dumps(list(errors), separators=(",", ":")),
                int(time.time()),
                job_id,
            ),
        )
        conn.commit()


def query_batch_jobs(job_name: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
    safe_limit = max(1, min(int(limit), 500))
    query = """
        SELECT job_id, job_name, status, total_items, chunks_processed, chunks_failed,
               items_processed, errors_json, created_ts, completed_ts
        FROM batch_jobs
    """
    params: list[Any] = []
    if job_name is not None:
        query += " WHERE job_name = ?"
        params.append(job_name)
    query += " ORDER BY created_ts DESC, rowid DESC LIMIT ?"
    params.append(safe_limit)

    with get_conn() as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_batch_job(row) for row in rows]


def upsert_scheduled_job(job_name: str, cron_string: str, job_key: str) -> dict[str, Any]:
    _validate_required(job_name, "job_name")
    _validate_required(cron_string, "cron_string")
    _validate_required(job_key, "job_key")
    now_ts = int(time.time())
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO scheduled_jobs(job_name, cron_string, job_key, created_ts)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(job_name) DO UPDATE SET
                cron_string = excluded.cron_string,
                job_key = excluded.job_key
            """,
            (job_name, cron_string, job_key, now_ts),
        )
        conn.commit()
        row = conn.execute(
            "SELECT job_name, cron_string, job_key, created_ts FROM scheduled_jobs WHERE job_name = ?",
            (job_name,),
        ).fetchone()
    return {
        "job_name": str(row["job_name"]),
        "cron_string": str(row["cron_string"]),
        "job_key": str(row["job_key"]),
        "created_ts": int(row["created_ts"]),
    }
