import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import sentry_sdk

from career_pulse.api.v1.health import router as health_router
from career_pulse.api.v1.status import router as status_router
from career_pulse.api.v1.overview import router as overview_router
from career_pulse.api.v1.insights import router as insights_router
from career_pulse.api.v1.ingest import router as ingest_router
from career_pulse.api.v1.analytics import router as analytics_router
from career_pulse.core.cors import cors_allow_credentials, cors_allowed_origins
from career_pulse.core.errors import InsightsError, ParseError
from career_pulse.core.rate_limit import limiter
from career_pulse.core.config import settings
from career_pulse.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

app = FastAPI(title="Career Pulse API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=cors_allow_credentials(),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(InsightsError)
async def insights_error_handler(request: Request, exc: InsightsError):
    logger.warning("request_failed path=%s code=%s: %s", request.url.path, exc.code, exc)
    content = {"success": False, "error": str(exc), "code": exc.code}
    if isinstance(exc, ParseError):
        content["rawText"] = exc.raw_text
    return JSONResponse(status_code=exc.status_code, content=content)


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        message = f"{_field_name(first.get('loc', ()))}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    logger.warning("request_invalid path=%s: %s", request.url.path, message)
    return JSONResponse(status_code=400, content={"success": False, "error": message, "code": "invalid_input"})


# SlowAPIMiddleware only dispatches synchronous handlers
@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("request_rate_limited path=%s limit=%s", request.url.path, exc.detail)
    response = JSONResponse(
        status_code=429,
        content={"success": False, "error": f"Rate limit exceeded: {exc.detail}", "code": "rate_limited"},
    )
    return request.app.state.limiter._inject_headers(response, getattr(request.state, "view_rate_limit", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("request_unhandled_error path=%s", request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(status_router, prefix="/v1", tags=["Health"])
app.include_router(overview_router, prefix="/v1", tags=["Overview"])
app.include_router(insights_router, prefix="/v1", tags=["Insights"])
app.include_router(ingest_router, prefix="/v1", tags=["Ingestion"])
app.include_router(analytics_router, prefix="/v1", tags=["Analytics"])
