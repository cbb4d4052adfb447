"""Health check endpoint for service monitoring."""

from fastapi import APIRouter
from pydantic import BaseModel

from merchant_risk import __version__
from merchant_risk.service.scoring import load_scoring_settings

health_router = APIRouter()


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    ruleset_fingerprint: str


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Returns the health status of the service and the active scoring rule set.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        ruleset_fingerprint=load_scoring_settings().fingerprint,
    )
