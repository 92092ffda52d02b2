from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    project_id: str | None
    location: str
    bq_dataset: str
    bq_news_table: str
    ai_provider: str
    gen_model: str
    openai_api_key: str | None
    openai_base_url: str | None
    news_api_key: str | None
    news_api_base_url: str
    trends_base_url: str
    http_timeout_s: float
    google_application_credentials: str | None
    analytics_enabled: bool
    analytics_db_path: str
    analytics_retention_days: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list("CORS_ALLOWED_ORIGINS", ["*"]),
    project_id=_get_env("PROJECT_ID") or _get_env("GCP_PROJECT_ID"),
    location=_get_env("LOCATION") or _get_env("GCP_LOCATION", "us-central1") or "us-central1",
    bq_dataset=_get_env("BQ_DATASET", "career_insights") or "career_insights",
    bq_news_table=_get_env("BQ_NEWS_TABLE", "news_articles") or "news_articles",
    ai_provider=(_get_env("AI_PROVIDER", "vertex") or "vertex").strip().lower(),
    gen_model=(_get_env("VERTEX_GEN_MODEL", "gemini-2.5-flash") or "gemini-2.5-flash").strip(),
    openai_api_key=_get_env("OPENAI_API_KEY") or _get_env("GEMINI_API_KEY"),
    openai_base_url=_get_env(
        "OPENAI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"
    ),
    news_api_key=_get_env("NEWS_API_KEY"),
    news_api_base_url=_get_env("NEWS_API_BASE_URL", "https://newsapi.org/v2") or "https://newsapi.org/v2",
    trends_base_url=_get_env("TRENDS_BASE_URL", "https://trends.google.com/trends/api") or "https://trends.google.com/trends/api",
    http_timeout_s=_get_env_float("HTTP_TIMEOUT_S", 60.0),
    google_application_credentials=_get_env("GOOGLE_APPLICATION_CREDENTIALS"),
    analytics_enabled=_get_env_bool("ANALYTICS_ENABLED", True),
    analytics_db_path=_get_env("ANALYTICS_DB_PATH", "data/analytics.db") or "data/analytics.db",
    analytics_retention_days=_get_env_int("ANALYTICS_RETENTION_DAYS", 90),
)

if settings.ai_provider not in {"vertex", "openai"}:
    raise RuntimeError("AI_PROVIDER must be either 'vertex' or 'openai'.")
