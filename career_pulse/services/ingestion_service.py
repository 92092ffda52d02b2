from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

from career_pulse.core.errors import InputValidationError
from career_pulse.news.client import NewsApiClient
from career_pulse.trends import TrendsProvider
from career_pulse.trends.client import DEFAULT_TIME_RANGE
from career_pulse.warehouse import Warehouse

logger = logging.getLogger(__name__)


class IngestionService:
    def __init__(self, news: NewsApiClient, warehouse: Warehouse, trends: TrendsProvider | None = None):
        self._news = news
        self._warehouse = warehouse
        self._trends = trends

    async def ingest_news(self, query: str, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Fetch articles for ``query`` from the news provider and append them to the warehouse.

        ``strict`` turns off common-keyword tagging regardless of
        ``includeCommonTagKeywords``. With ``includeTrends`` a Google Trends
        snapshot for the query terms is attached as ``trends``; it is left out
        when the trends provider fails.
        """
        query = (query or "").strip()
        if not query:
            raise InputValidationError("Provide 'query' in JSON body or ?query=...")
        options = options or {}

        include_common = options.get("includeCommonTagKeywords")
        if options.get("strict") is True:
            include_common = False

        fetched = await self._news.fetch_news(
            query,
            page_size=options.get("pageSize"),
            domains=options.get("domains"),
            sources=options.get("sources"),
            include_common_tag_keywords=True if include_common is None else bool(include_common),
        )
        articles = fetched["articles"]
        if not articles:
            logger.info("news_ingest_empty query=%s", query)
            return {
                "success": True,
                "message": "No articles found for the given query",
                "ingested": 0,
                "totalFound": 0,
                "query": query,
            }

        inserted = await asyncio.to_thread(self._warehouse.insert_articles, articles)
        logger.info(
            json.dumps(
                {
                    "event": "news_ingested",
                    "query": query,
                    "found": fetched["totalResults"],
                    "inserted": inserted,
                }
            )
        )
        result: dict[str, Any] = {
            "success": True,
            "message": "News ingested successfully",
            "ingested": inserted,
            "totalFound": fetched["totalResults"],
            "query": query,
        }
        if options.get("includeTrends"):
            trends = await self._trends_snapshot(query, options)
            if trends is not None:
                result["trends"] = trends
        return result

    async def _trends_snapshot(self, query: str, options: Mapping[str, Any]) -> dict[str, Any] | None:
        if self._trends is None:
            logger.warning("trends_provider_unconfigured query=%s", query)
            return None
        try:
            return await self._trends.get_snapshot(
                [query],
                time_range=options.get("trendsTimeRange") or DEFAULT_TIME_RANGE,
                geo=options.get("trendsGeo") or "",
            )
        except Exception as exc:  # noqa: BLE001 - the snapshot is optional
            logger.warning("trends_fetch_failed query=%s: %s", query, exc)
            return None
