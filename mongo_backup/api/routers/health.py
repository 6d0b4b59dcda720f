"""Health check endpoint."""

from fastapi import APIRouter

from ..models import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Liveness check."""
    return HealthStatus(status="ok", message="MongoDB Backup Server is running")
