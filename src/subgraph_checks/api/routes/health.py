from fastapi import APIRouter, Depends, Response, status

from subgraph_checks.api.schemas import HealthResponse, ReadinessResponse
from subgraph_checks.config import Settings, get_settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness check: is the process alive?"""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> ReadinessResponse:
    """Readiness check: are the webhook secret and API key configured?"""
    ready = ReadinessResponse(
        hmac_secret="configured" if settings.hmac_secret else "missing",
        api_key="configured" if settings.api_key else "missing",
    )
    if settings.hmac_secret and settings.api_key:
        return ready
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ready.model_copy(update={"status": "degraded"})
