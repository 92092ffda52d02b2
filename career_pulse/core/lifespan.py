import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from career_pulse.analytics.db import init_db, purge_old_records
from career_pulse.core.config import settings

logger = logging.getLogger(__name__)

PURGE_INTERVAL_S = 3600


def _log_startup() -> None:
    if settings.ai_provider == "vertex":
        auth_mode = "service_account_file" if settings.google_application_credentials else "application_default"
    else:
        auth_mode = "api_key" if settings.openai_api_key else "missing_api_key"
    logger.info(
        "startup provider=%s model=%s auth=%s project=%s dataset=%s.%s",
        settings.ai_provider,
        settings.gen_model,
        auth_mode,
        settings.project_id or "-",
        settings.bq_dataset,
        settings.bq_news_table,
    )
    if not settings.project_id:
        logger.warning("startup_missing_project_id warehouse queries will fail until PROJECT_ID is set")
    if not settings.news_api_key:
        logger.warning("startup_missing_news_api_key ingestion is disabled")


@asynccontextmanager
async def lifespan(app):
    _log_startup()
    init_db()
    purge_old_records()

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = purge_old_records()
                if any(deleted.values()):
                    logger.info("analytics_retention_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover
                logger.warning("analytics_retention_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=PURGE_INTERVAL_S)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
