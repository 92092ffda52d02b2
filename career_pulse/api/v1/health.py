from fastapi import APIRouter

from career_pulse.core.config import settings

router = APIRouter()


@router.get("/health", summary="Health Check", description="Liveness probe; does not touch external services.")
async def health_check():
    return {"status": "healthy", "provider": settings.ai_provider}
