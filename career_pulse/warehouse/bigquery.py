from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Sequence

from google.cloud import bigquery

logger = logging.getLogger(__name__)

MAX_QUERY_LIMIT = 100
MAX_QUERY_DAYS = 365


def _sanitize_int(value: Any, default: int, maximum: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, min(parsed, maximum))


def _lowered(values: Sequence[str] | None) -> list[str]:
    return [str(v).strip().lower() for v in (values or []) if str(v or "").strip()]


def _utc_iso(value: Any) -> str:
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return moment.isoformat()
    if isinstance(value, str) and value.strip():
        return value.strip()
    return datetime.now(timezone.utc).isoformat()


class BigQueryWarehouse:
    def __init__(self, project_id: str | None, dataset: str, table: str):
        self._project_id = project_id
        self._dataset = dataset
        self._table = table
        self._client: bigquery.Client | None = None
        self._lock = threading.Lock()

    @property
    def table_ref(self) -> str:
        return f"{self._project_id}.{self._dataset}.{self._table}"

    def _bq(self) -> bigquery.Client:
        with self._lock:
            if self._client is None:
                self._client = bigquery.Client(project=self._project_id)
            return self._client

    def _run(self, sql: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        job_config = bigquery.QueryJobConfig(query_parameters=params or [])
        rows = self._bq().query(sql, job_config=job_config).result()
        return [dict(row.items()) for row in rows]

    def query_top_skills(
        self, days: int, limit: int, filter_skills: Sequence[str] | None = None
    ) -> list[dict[str, Any]]:
        skills = _lowered(filter_skills)
        sql = f"""
            SELECT skill, COUNT(*) AS mentions
            FROM `{self.table_ref}`, UNNEST(tags) AS skill
            WHERE DATE(published_at) >= DATE_SUB(CURRENT_DATE(), INTERVAL @daysPast DAY)
            {"AND LOWER(skill) IN UNNEST(@skills)" if skills else ""}
            GROUP BY skill
            ORDER BY mentions DESC
            LIMIT @limit
        """
        params: list[Any] = [
            bigquery.ScalarQueryParameter("daysPast", "INT64", _sanitize_int(days, 7, MAX_QUERY_DAYS)),
            bigquery.ScalarQueryParameter("limit", "INT64", _sanitize_int(limit, 10, MAX_QUERY_LIMIT)),
        ]
        if skills:
            params.append(bigquery.ArrayQueryParameter("skills", "STRING", skills))
        return self._run(sql, params)

    def query_articles_by_keywords(self, keywords: Sequence[str], days: int, limit: int) -> list[dict[str, Any]]:
        terms = _lowered(keywords)
        sql = f"""
            SELECT id, title, body, source, published_at, tags
            FROM `{self.table_ref}`
            WHERE DATE(published_at) >= DATE_SUB(CURRENT_DATE(), INTERVAL @daysPast DAY)
            {"AND EXISTS (SELECT 1 FROM UNNEST(@keywords) kw WHERE STRPOS(LOWER(title), kw) > 0 OR STRPOS(LOWER(body), kw) > 0)" if terms else ""}
            ORDER BY published_at DESC
            LIMIT @limit
        """
        params: list[Any] = [
            bigquery.ScalarQueryParameter("daysPast", "INT64", _sanitize_int(days, 7, MAX_QUERY_DAYS)),
            bigquery.ScalarQueryParameter("limit", "INT64", _sanitize_int(limit, 10, MAX_QUERY_LIMIT)),
        ]
        if terms:
            params.append(bigquery.ArrayQueryParameter("keywords", "STRING", terms))
        return self._run(sql, params)

    def query_articles_by_tags(self, tags: Sequence[str], days: int, limit: int) -> list[dict[str, Any]]:
        wanted = _lowered(tags)
        sql = f"""
            WITH filtered AS (
              SELECT id, title, body, source, published_at, tags
              FROM `{self.table_ref}`
              WHERE DATE(published_at) >= DATE_SUB(CURRENT_DATE(), INTERVAL @daysPast DAY)
            )
            SELECT id, title, body, source, published_at, tags
            FROM filtered, UNNEST(tags) AS tag
            {"WHERE LOWER(tag) IN UNNEST(@tags)" if wanted else ""}
            QUALIFY ROW_NUMBER() OVER (PARTITION BY id ORDER BY published_at DESC) = 1
            ORDER BY published_at DESC
            LIMIT @limit
        """
        params: list[Any] = [
            bigquery.ScalarQueryParameter("daysPast", "INT64", _sanitize_int(days, 7, MAX_QUERY_DAYS)),
            bigquery.ScalarQueryParameter("limit", "INT64", _sanitize_int(limit, 10, MAX_QUERY_LIMIT)),
        ]
        if wanted:
            params.append(bigquery.ArrayQueryParameter("tags", "STRING", wanted))
        return self._run(sql, params)

    def query_top_sources(self, days: int, limit: int) -> list[dict[str, Any]]:
        sql = f"""
            SELECT source, COUNT(*) AS count
            FROM `{self.table_ref}`
            WHERE DATE(published_at) >= DATE_SUB(CURRENT_DATE(), INTERVAL @daysPast DAY)
            GROUP BY source
            ORDER BY count DESC
            LIMIT @limit
        """
        return self._run(
            sql,
            [
                bigquery.ScalarQueryParameter("daysPast", "INT64", _sanitize_int(days, 7, MAX_QUERY_DAYS)),
                bigquery.ScalarQueryParameter("limit", "INT64", _sanitize_int(limit, 10, MAX_QUERY_LIMIT)),
            ],
        )

    def query_volume_by_day(self, days: int) -> list[dict[str, Any]]:
        sql = f"""
            SELECT DATE(published_at) AS day, COUNT(*) AS count
            FROM `{self.table_ref}`
            WHERE DATE(published_at) >= DATE_SUB(CURRENT_DATE(), INTERVAL @daysPast DAY)
            GROUP BY day
            ORDER BY day
        """
        rows = self._run(
            sql,
            [bigquery.ScalarQueryParameter("daysPast", "INT64", _sanitize_int(days, 7, MAX_QUERY_DAYS))],
        )
        for row in rows:
            day = row.get("day")
            if hasattr(day, "isoformat"):
                row["day"] = day.isoformat()
        return rows

    def get_article_count(self) -> int:
        rows = self._run(f"SELECT COUNT(*) AS count FROM `{self.table_ref}`")
        return int(rows[0]["count"]) if rows else 0

    def insert_articles(self, articles: Sequence[dict[str, Any]]) -> int:
        if not articles:
            return 0
        ingested_at = datetime.now(timezone.utc).isoformat()
        rows = [
            {
                "id": article.get("id"),
                "title": article.get("title"),
                "body": article.get("body"),
                "source": article.get("source"),
                "published_at": _utc_iso(article.get("published_at") or article.get("publishedAt")),
                "tags": list(article.get("tags") or []),
                "ingested_at": ingested_at,
            }
            for article in articles
        ]
        errors = self._bq().insert_rows_json(self.table_ref, rows)
        if errors:
            raise RuntimeError(f"BigQuery insert failed for {len(errors)} rows: {errors[:3]}")
        logger.info("warehouse_insert rows=%s table=%s", len(rows), self.table_ref)
        return len(rows)
