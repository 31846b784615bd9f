"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from idl_sentinel.config import Settings
from idl_sentinel.presentation.http.dependencies import get_app_settings

router = APIRouter()


@router.get("/metrics")
async def metrics(settings: Settings = Depends(get_app_settings)) -> Response:
    """Expose metrics in the Prometheus text format."""
    if not settings.prometheus_enabled:
        raise HTTPException(status_code=404, detail="Metrics disabled")
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
