"""Health and readiness routes."""

from datetime import datetime, timezone

from fastapi import APIRouter

from apim_billing.core.api_models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness endpoint for load balancers and probes."""
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))


__all__ = ["router"]
