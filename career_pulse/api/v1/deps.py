from __future__ import annotations

from career_pulse.ai.factory import get_credential_cache, get_generative_client
from career_pulse.core.config import settings
from career_pulse.news import NewsApiClient, get_news_client
from career_pulse.services.ingestion_service import IngestionService
from career_pulse.services.insights_service import InsightsService
from career_pulse.services.overview_service import OverviewService
from career_pulse.services.status_service import StatusService
from career_pulse.trends import get_trends_provider
from career_pulse.warehouse import get_default_warehouse


def get_overview_service() -> OverviewService:
    return OverviewService(get_default_warehouse())


def get_insights_service() -> InsightsService:
    return InsightsService(get_default_warehouse(), get_generative_client())


def get_ingestion_service() -> IngestionService:
    return IngestionService(get_news_client(), get_default_warehouse(), get_trends_provider())


def get_status_service() -> StatusService:
    credentials = get_credential_cache() if settings.ai_provider == "vertex" else None
    return StatusService(get_default_warehouse(), get_news_client(), credentials)


def get_news_source() -> NewsApiClient:
    return get_news_client()
