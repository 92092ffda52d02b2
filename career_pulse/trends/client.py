from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Sequence

import httpx

from career_pulse.core.errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIME_RANGE = "now 7-d"
MAX_RELATED_QUERIES = 10


def split_terms(keywords: Sequence[str] | None) -> list[str]:
    terms: list[str] = []
    for keyword in keywords or []:
        for term in (keyword or "").split(","):
            term = term.strip()
            if term and term not in terms:
                terms.append(term)
    return terms


def _strip_guard(text: str) -> dict[str, Any]:
    # responses are prefixed with an anti-XSSI guard such as ")]}',"
    start = text.find("{")
    if start < 0:
        raise ProviderError("Google Trends returned an unreadable response")
    return json.loads(text[start:])


def timeline_points(payload: dict[str, Any]) -> list[dict[str, Any]]:
    timeline = (payload.get("default") or {}).get("timelineData") or []
    points = []
    for point in timeline:
        values = point.get("value") or [0]
        points.append(
            {
                "time": point.get("formattedTime") or point.get("time"),
                "value": int(values[0] or 0),
            }
        )
    return points


def top_queries(payload: dict[str, Any]) -> list[dict[str, Any]]:
    ranked = (payload.get("default") or {}).get("rankedList") or []
    keywords = (ranked[0].get("rankedKeyword") or []) if ranked else []
    return [{"query": item.get("query"), "value": item.get("value")} for item in keywords[:MAX_RELATED_QUERIES]]


class GoogleTrendsClient:
    """Interest-over-time and related queries from the public Google Trends widgets."""

    def __init__(
        self,
        *,
        base_url: str = "https://trends.google.com/trends/api",
        timeout_s: float = 10.0,
        language: str = "en-US",
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._language = language
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.get(
            f"{self._base_url}{path}",
            params={"hl": self._language, "tz": 0, **params},
        )
        response.raise_for_status()
        return _strip_guard(response.text)

    async def _widgets(self, term: str, time_range: str, geo: str) -> dict[str, dict[str, Any]]:
        explore = await self._get(
            "/explore",
            {
                "req": json.dumps(
                    {
                        "comparisonItem": [{"keyword": term, "geo": geo, "time": time_range}],
                        "category": 0,
                        "property": "",
                    }
                )
            },
        )
        return {widget.get("id"): widget for widget in explore.get("widgets") or [] if widget.get("token")}

    async def _widget_data(self, path: str, widget: dict[str, Any] | None) -> dict[str, Any]:
        if widget is None:
            return {}
        return await self._get(path, {"req": json.dumps(widget.get("request") or {}), "token": widget["token"]})

    async def _term_snapshot(self, term: str, time_range: str, geo: str) -> dict[str, Any]:
        widgets = await self._widgets(term, time_range, geo)
        interest, related = await asyncio.gather(
            self._widget_data("/widgetdata/multiline", widgets.get("TIMESERIES")),
            self._widget_data("/widgetdata/relatedsearches", widgets.get("RELATED_QUERIES")),
        )
        return {
            "term": term,
            "points": timeline_points(interest),
            "queries": top_queries(related),
        }

    async def get_snapshot(
        self,
        keywords: Sequence[str],
        *,
        time_range: str = DEFAULT_TIME_RANGE,
        geo: str = "",
    ) -> dict[str, Any]:
        terms = split_terms(keywords)
        snapshot: dict[str, Any] = {
            "terms": terms,
            "interestOverTime": [],
            "relatedQueries": [],
            "timeframe": time_range,
        }
        if not terms:
            return snapshot

        results = await asyncio.gather(
            *(self._term_snapshot(term, time_range, geo) for term in terms),
            return_exceptions=True,
        )
        for term, result in zip(terms, results):
            if isinstance(result, BaseException):
                logger.warning("trends_term_failed term=%s: %s", term, result)
                continue
            snapshot["interestOverTime"].append({"term": term, "points": result["points"]})
            snapshot["relatedQueries"].append({"term": term, "queries": result["queries"]})
        return snapshot

    async def aclose(self) -> None:
        await self._client.aclose()
