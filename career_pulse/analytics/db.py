from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from career_pulse.core.config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_db_path() -> Path:
    return Path(settings.analytics_db_path)


def init_db() -> None:
    if not settings.analytics_enabled:
        return
    db_path = _get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS generation_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                run_id TEXT NOT NULL,
                operation TEXT NOT NULL,
                model TEXT,
                status TEXT NOT NULL,
                finish_reason TEXT,
                error_code TEXT,
                prompt_chars INTEGER,
                output_chars INTEGER,
                latency_ms INTEGER
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_generation_runs_created_at
            ON generation_runs (created_at)
            """
        )
        conn.commit()


def log_generation_run(
    *,
    run_id: str,
    operation: str,
    model: str | None,
    status: str,
    finish_reason: str | None = None,
    error_code: str | None = None,
    prompt_chars: int | None = None,
    output_chars: int | None = None,
    latency_ms: int | None = None,
) -> None:
    if not settings.analytics_enabled:
        return
    db_path = _get_db_path()
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO generation_runs (
                created_at, run_id, operation, model, status, finish_reason,
                error_code, prompt_chars, output_chars, latency_ms
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                _utc_now(),
                run_id,
                operation,
                model,
                status,
                finish_reason,
                error_code,
                prompt_chars,
                output_chars,
                latency_ms,
            ),
        )
        conn.commit()


def purge_old_records() -> dict[str, int]:
    if not settings.analytics_enabled:
        return {"generation_runs": 0}

    retention = max(1, int(settings.analytics_retention_days))
    with sqlite3.connect(_get_db_path()) as conn:
        cur = conn.execute(
            "DELETE FROM generation_runs WHERE created_at < datetime('now', ?)",
            (f"-{retention} days",),
        )
        conn.commit()
        return {"generation_runs": int(cur.rowcount or 0)}


def _row_to_dict(cursor: sqlite3.Cursor, row: tuple) -> dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def get_summary() -> dict[str, Any]:
    if not settings.analytics_enabled:
        return {"enabled": False}
    with sqlite3.connect(_get_db_path()) as conn:
        total = conn.execute("SELECT COUNT(*) FROM generation_runs").fetchone()[0]
        total_7d = conn.execute(
            "SELECT COUNT(*) FROM generation_runs WHERE created_at >= datetime('now', '-7 days')"
        ).fetchone()[0]
        cur = conn.execute(
            """
            SELECT operation, status, COUNT(*) AS count, CAST(AVG(latency_ms) AS INTEGER) AS avg_latency_ms
            FROM generation_runs
            GROUP BY operation, status
            ORDER BY count DESC
            """
        )
        by_operation = [_row_to_dict(cur, row) for row in cur.fetchall()]
    return {
        "enabled": True,
        "total": total,
        "total_7d": total_7d,
        "by_operation": by_operation,
    }


def get_latest(limit: int = 20) -> list[dict[str, Any]]:
    if not settings.analytics_enabled:
        return []
    with sqlite3.connect(_get_db_path()) as conn:
        cur = conn.execute(
            """
            SELECT created_at, run_id, operation, model, status, finish_reason, error_code, latency_ms
            FROM generation_runs
            ORDER BY id DESC
            LIMIT ?
            """,
            (limit,),
        )
        return [_row_to_dict(cur, row) for row in cur.fetchall()]
