from fastapi import APIRouter, Depends, Request

from career_pulse.api.v1.deps import get_insights_service
from career_pulse.core.rate_limit import rate_limit
from career_pulse.core.security import require_api_key
from career_pulse.schemas.insights import InsightsRequest, PromptRequest, RoadmapRequest, SynthesisRequest
from career_pulse.services.insights_service import InsightsService

router = APIRouter()


@router.get("/insights", summary="Career insights for a query-string profile")
@rate_limit()
async def insights_get(
    request: Request,
    skills: str = "",
    role: str = "",
    experience: str = "",
    interests: str = "",
    location: str = "",
    service: InsightsService = Depends(get_insights_service),
):
    _ = request
    return await service.generate_career_insights(
        {
            "skills": skills,
            "role": role,
            "experience": experience,
            "interests": interests,
            "location": location,
        }
    )


@router.post("/insights", summary="Career insights for a free-text profile")
@rate_limit()
async def insights_post(
    request: Request,
    payload: InsightsRequest,
    service: InsightsService = Depends(get_insights_service),
):
    _ = request
    return await service.generate_career_insights(payload.model_dump(by_alias=True))


@router.post("/synthesis", summary="Merge real-time and government insights into one report")
@rate_limit()
async def synthesis(
    request: Request,
    payload: SynthesisRequest,
    service: InsightsService = Depends(get_insights_service),
):
    _ = request
    return await service.synthesize(
        real_time_text=payload.real_time_text,
        government_text=payload.government_text,
        role=payload.role,
        question=payload.question,
        detail=payload.detail,
    )


@router.post("/roadmap", summary="Structured learning roadmap")
@rate_limit()
async def roadmap(
    request: Request,
    payload: RoadmapRequest,
    service: InsightsService = Depends(get_insights_service),
):
    _ = request
    return await service.generate_roadmap(payload.model_dump(by_alias=True))


@router.get("/trends", summary="Top skills mentioned in recent news")
async def trends(
    days: str | None = None,
    limit: str | None = None,
    service: InsightsService = Depends(get_insights_service),
):
    return await service.get_trends(days, limit)


@router.get("/trends/cards", summary="Top skills reformatted as six-line cards")
@rate_limit()
async def trend_cards(
    request: Request,
    days: str | None = None,
    limit: str | None = None,
    service: InsightsService = Depends(get_insights_service),
):
    _ = request
    return await service.get_trend_cards(days, limit)


@router.post("/prompt", summary="Raw prompt pass-through")
@rate_limit()
async def prompt(
    request: Request,
    payload: PromptRequest,
    _auth: None = Depends(require_api_key),
    service: InsightsService = Depends(get_insights_service),
):
    _ = request
    return await service.generate(payload.prompt, payload.options())
