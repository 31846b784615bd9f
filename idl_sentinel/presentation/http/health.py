"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text

from idl_sentinel.config import Settings
from idl_sentinel.container import Container
from idl_sentinel.infrastructure.telemetry import get_logger
from idl_sentinel.presentation.http.dependencies import get_app_settings, get_container

logger = get_logger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    environment: str
    checks: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """Basic health check endpoint.

    Returns service status without checking dependencies.
    Use /ready for full readiness check.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=settings.version,
        environment=settings.environment,
        checks={"channels": settings.enabled_channels},
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    container: Container = Depends(get_container),
) -> ReadinessResponse:
    """Readiness check endpoint.

    Verifies all dependencies are available:
    - Database connection
    """
    checks: dict[str, bool] = {}

    try:
        async with container.session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as exc:
        logger.warning("Database readiness check failed", extra={"error": str(exc)})
        checks["database"] = False

    return ReadinessResponse(ready=all(checks.values()), checks=checks)


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness check endpoint.

    Simple check that the service is running.
    """
    return {"status": "alive"}
