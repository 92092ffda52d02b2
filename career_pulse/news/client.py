from __future__ import annotations

import hashlib
import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

import httpx

from career_pulse.core.errors import (
    AuthenticationError,
    InsightsError,
    NetworkError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
LOOKBACK_DAYS = 7
REMOVED_TITLE = "[Removed]"

COMMON_TAG_KEYWORDS = (
    "ai",
    "artificial intelligence",
    "machine learning",
    "ml",
    "data science",
    "software engineer",
    "developer",
    "programming",
    "coding",
    "python",
    "javascript",
    "react",
    "nodejs",
    "cloud",
    "aws",
    "azure",
    "gcp",
    "career",
    "job",
    "hiring",
    "salary",
    "remote work",
    "startup",
    "technology",
    "tech",
    "innovation",
    "digital transformation",
)

_TRUNCATION_RE = re.compile(r"\[\+\d+\s+chars\]")
_WS_RE = re.compile(r"\s+")


def clean_text(text: str | None) -> str:
    if not text:
        return ""
    return _WS_RE.sub(" ", _TRUNCATION_RE.sub("", text)).strip()


def _date_days_ago(days: int, today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return (today - timedelta(days=days)).isoformat()


def extract_tags(query: str | None, article: Mapping[str, Any], *, include_common: bool = True) -> list[str]:
    tags: list[str] = []

    def _add(tag: str) -> None:
        if tag and tag not in tags:
            tags.append(tag)

    for term in (query or "").split(","):
        _add(term.strip().lower())

    if include_common:
        text = f"{article.get('title') or ''} {article.get('description') or ''}".lower()
        for keyword in COMMON_TAG_KEYWORDS:
            if keyword in text:
                _add(keyword.replace(" ", "-"))
    return tags


def _article_id(article: Mapping[str, Any]) -> str:
    basis = article.get("url") or f"{article.get('title')}|{article.get('publishedAt')}"
    return hashlib.sha1(str(basis).encode("utf-8")).hexdigest()[:20]


def process_articles(
    articles: Iterable[Mapping[str, Any]],
    query: str,
    *,
    include_common: bool = True,
) -> dict[str, Any]:
    processed: list[dict[str, Any]] = []
    for article in articles or []:
        title = article.get("title")
        source = (article.get("source") or {}).get("name")
        if not title or title == REMOVED_TITLE or not article.get("description") or not source:
            continue
        processed.append(
            {
                "id": _article_id(article),
                "title": clean_text(title),
                "body": clean_text(article.get("description") or article.get("content")),
                "source": source,
                "published_at": article.get("publishedAt"),
                "url": article.get("url"),
                "tags": extract_tags(query, article, include_common=include_common),
            }
        )
    return {"articles": processed, "totalResults": len(processed), "query": query}


def handle_error(error: BaseException) -> BaseException:
    if isinstance(error, InsightsError):
        return error
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 401:
            return AuthenticationError("Invalid NewsAPI key. Please check your API key.")
        if status == 429:
            return RateLimitError("NewsAPI rate limit exceeded. Please try again later.")
        if status == 426:
            return ProviderError("NewsAPI upgrade required. You may need a paid plan.", provider_status=426)
        try:
            message = error.response.json().get("message")
        except ValueError:
            message = None
        return ProviderError(f"NewsAPI error ({status}): {message or error}", provider_status=status)
    if isinstance(error, httpx.TimeoutException):
        return ProviderTimeoutError("Request timeout. NewsAPI took too long to respond.")
    if isinstance(error, httpx.NetworkError):
        return NetworkError("Network error. Check your internet connection.")
    return error


class NewsApiClient:
    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://newsapi.org/v2",
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            logger.warning("news_api_key_missing")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def _get(self, path: str, params: dict[str, Any], *, timeout: float | None = None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"params": params, "headers": {"X-Api-Key": self._api_key or ""}}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = await self._client.get(f"{self._base_url}{path}", **kwargs)
        response.raise_for_status()
        payload = response.json()
        if payload.get("status") != "ok":
            raise ProviderError(f"NewsAPI error: {payload.get('message') or 'unknown error'}")
        return payload

    async def fetch_news(
        self,
        query: str,
        *,
        page_size: int | None = None,
        sort_by: str = "publishedAt",
        language: str = "en",
        from_date: str | None = None,
        to_date: str | None = None,
        domains: str | None = None,
        sources: str | None = None,
        include_common_tag_keywords: bool = True,
    ) -> dict[str, Any]:
        if not self._api_key:
            raise AuthenticationError("NewsAPI key is required")

        params: dict[str, Any] = {
            "q": query,
            "pageSize": max(1, min(int(page_size or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)),
            "sortBy": sort_by,
            "language": language,
            "from": from_date or _date_days_ago(LOOKBACK_DAYS),
            "to": to_date or datetime.now(timezone.utc).date().isoformat(),
        }
        if domains:
            params["domains"] = domains
        if sources:
            params["sources"] = sources

        try:
            payload = await self._get("/everything", params)
        except Exception as exc:
            logger.error("news_fetch_failed query=%s: %s", query, exc)
            mapped = handle_error(exc)
            if mapped is exc:
                raise
            raise mapped from exc
        return process_articles(
            payload.get("articles") or [],
            query,
            include_common=include_common_tag_keywords,
        )

    async def validate_api_key(self) -> bool:
        if not self._api_key:
            return False
        try:
            await self._get("/top-headlines", {"pageSize": 1, "country": "us"}, timeout=5.0)
        except (httpx.HTTPError, InsightsError, ValueError) as exc:
            logger.info("news_api_key_validation_failed: %s", exc)
            return False
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
