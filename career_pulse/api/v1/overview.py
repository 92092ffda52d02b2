from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from career_pulse.api.v1.deps import get_overview_service
from career_pulse.schemas.preferences import Preferences
from career_pulse.services.overview_service import OverviewService

router = APIRouter()


@router.get(
    "/overview",
    summary="Personalized overview",
    description="Aggregated trending skills, news, policy and market sections for dashboards.",
)
async def overview(
    role: str = "",
    skills: str = "",
    interests: str = "",
    days: str | None = None,
    limit: str | None = None,
    query: str = "",
    q: str = "",
    policy: str = "",
    emerging: str = "",
    service: OverviewService = Depends(get_overview_service),
):
    prefs = Preferences.model_validate(
        {
            "role": role,
            "skills": skills,
            "interests": interests,
            "days": days,
            "limit": limit,
            "query": query,
            "q": q,
            "policy": policy,
            "emerging": emerging,
        }
    )
    result = await service.get_overview(prefs)
    if not result.get("success"):
        return JSONResponse(status_code=503, content=result)
    return result
