from fastapi import APIRouter, Body, Depends

from career_pulse.api.v1.deps import get_ingestion_service, get_news_source
from career_pulse.core.security import require_api_key
from career_pulse.news.client import NewsApiClient
from career_pulse.schemas.insights import IngestRequest
from career_pulse.services.ingestion_service import IngestionService

router = APIRouter()

DRY_RUN_QUERY = "artificial intelligence career"
DRY_RUN_PAGE_SIZE = 5


@router.post("/ingest/news", summary="Fetch news articles and append them to the warehouse")
async def ingest_news(
    payload: IngestRequest | None = Body(default=None),
    query: str = "",
    q: str = "",
    _auth: None = Depends(require_api_key),
    service: IngestionService = Depends(get_ingestion_service),
):
    payload = payload or IngestRequest()
    options = payload.model_dump(by_alias=True, exclude={"query"}, exclude_none=True)
    return await service.ingest_news(payload.query or query or q, options)


@router.post("/test/news", summary="Fetch news articles without storing them")
async def preview_news(
    payload: IngestRequest | None = Body(default=None),
    _auth: None = Depends(require_api_key),
    news: NewsApiClient = Depends(get_news_source),
):
    query = (payload.query if payload else "").strip() or DRY_RUN_QUERY
    result = await news.fetch_news(query, page_size=DRY_RUN_PAGE_SIZE)
    return {"success": True, "message": "News fetched successfully (test mode)", **result}
