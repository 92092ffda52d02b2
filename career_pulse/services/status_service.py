from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from career_pulse.ai.credentials import CredentialCache
from career_pulse.news.client import NewsApiClient
from career_pulse.warehouse import Warehouse

logger = logging.getLogger(__name__)

SERVICE_NAME = "career-pulse-api"


class StatusService:
    def __init__(
        self,
        warehouse: Warehouse,
        news: NewsApiClient,
        credentials: CredentialCache | None = None,
    ):
        self._warehouse = warehouse
        self._news = news
        self._credentials = credentials

    async def _warehouse_status(self) -> dict[str, Any]:
        try:
            count = await asyncio.to_thread(self._warehouse.get_article_count)
        except Exception as exc:
            logger.warning("status_warehouse_failed: %s", exc)
            return {"status": "error", "error": str(exc)}
        return {"status": "healthy", "articleCount": count}

    async def _news_status(self) -> dict[str, Any]:
        if await self._news.validate_api_key():
            return {"status": "healthy"}
        return {"status": "error", "error": "Invalid API key"}

    async def _credentials_status(self) -> dict[str, Any]:
        if self._credentials is None:
            return {"status": "healthy", "mode": "api_key"}
        try:
            await self._credentials.get()
        except Exception as exc:
            logger.warning("status_credentials_failed: %s", exc)
            return {"status": "error", "error": str(exc)}
        return {"status": "healthy"}

    async def get_system_status(self) -> dict[str, Any]:
        warehouse, news, credentials = await asyncio.gather(
            self._warehouse_status(),
            self._news_status(),
            self._credentials_status(),
        )
        components = {"warehouse": warehouse, "newsapi": news, "generativeModel": credentials}
        degraded = any(component["status"] == "error" for component in components.values())
        return {
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "components": components,
            "overall": "degraded" if degraded else "healthy",
        }
