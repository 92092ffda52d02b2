from __future__ import annotations

from functools import lru_cache

from career_pulse.core.config import settings
from career_pulse.news.client import NewsApiClient


@lru_cache(maxsize=1)
def get_news_client() -> NewsApiClient:
    return NewsApiClient(
        settings.news_api_key,
        base_url=settings.news_api_base_url,
        timeout_s=min(settings.http_timeout_s, 10.0),
    )


__all__ = ["NewsApiClient", "get_news_client"]
