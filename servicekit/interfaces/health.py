"""
Health check router.

Provides a fixed liveness endpoint for load balancers and probes.
Always JSON, never authorized, and skipped by the access log unless
``debug_with_health`` is set.
"""

from fastapi import APIRouter

from servicekit.interfaces.schemas import HealthResponse

HEALTH_PATH = "/health"

router = APIRouter(tags=["health"])


@router.get(
    HEALTH_PATH,
    response_model=HealthResponse,
    summary="Health check",
    description="Returns a constant ok status.",
)
def health_check() -> HealthResponse:
    """Return current service health status."""
    return HealthResponse(status="ok")
