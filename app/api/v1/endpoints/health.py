"""Health check endpoints used for liveness and readiness checks."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Not ready (counter store unreachable)", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 if the quota counter store answers PING; 503 otherwise.

    Quota checks fail closed, so without the counter store every upload
    and download is refused and the instance should not receive traffic.
    """
    settings = get_settings()
    counter_store = getattr(request.app.state, "counter_store", None)
    if counter_store is not None and await counter_store.ping():
        return ReadinessResponse(storage_provider=settings.storage_provider)
    return JSONResponse(
        status_code=503,
        content=ReadinessErrorResponse(
            status="not_ready",
            message="Counter store unavailable",
        ).model_dump(),
    )
