from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from career_pulse.api.v1.deps import get_status_service
from career_pulse.services.status_service import StatusService

router = APIRouter()


@router.get("/status", summary="System status", description="Probe the warehouse, news provider and model credentials.")
async def system_status(service: StatusService = Depends(get_status_service)):
    status = await service.get_system_status()
    return JSONResponse(status_code=200 if status["overall"] == "healthy" else 503, content=status)
