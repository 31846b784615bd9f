"""HTTP presentation layer - REST API routes."""

from fastapi import APIRouter

from idl_sentinel.presentation.http.cron import router as cron_router
from idl_sentinel.presentation.http.health import router as health_router
from idl_sentinel.presentation.http.metrics import router as metrics_router
from idl_sentinel.presentation.http.notifications import router as notifications_router

# Main API router
api_router = APIRouter()

# Include sub-routers
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(metrics_router, tags=["Metrics"])
api_router.include_router(cron_router, tags=["Monitoring"])
api_router.include_router(notifications_router, tags=["Notifications"])

__all__ = ["api_router"]
