from __future__ import annotations

from functools import lru_cache

from career_pulse.core.config import settings
from career_pulse.trends.client import GoogleTrendsClient
from career_pulse.trends.provider import TrendsProvider


@lru_cache(maxsize=1)
def get_trends_provider() -> TrendsProvider:
    return GoogleTrendsClient(
        base_url=settings.trends_base_url,
        timeout_s=min(settings.http_timeout_s, 10.0),
    )


__all__ = ["GoogleTrendsClient", "TrendsProvider", "get_trends_provider"]
