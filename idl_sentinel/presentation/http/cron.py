"""Scheduler trigger endpoint - one monitoring run followed by the fan-out."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from idl_sentinel.application.services import MonitoringService, NotificationService
from idl_sentinel.infrastructure.telemetry import get_logger
from idl_sentinel.presentation.http.dependencies import (
    get_monitoring_service,
    get_notification_service,
    verify_cron_secret,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/cron", dependencies=[Depends(verify_cron_secret)])


class MonitorTriggerResponse(BaseModel):
    """Result of a scheduled monitoring pass."""

    success: bool
    monitoring: dict[str, Any]
    notifications: dict[str, dict[str, Any]]
    timestamp: str


@router.api_route("/monitor", methods=["GET", "POST"], response_model=MonitorTriggerResponse)
async def run_monitoring(
    monitoring: MonitoringService = Depends(get_monitoring_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> MonitorTriggerResponse:
    """Check all active targets, then deliver pending notifications.

    A FatalSetupError from the run propagates and maps to 503; every other
    failure is reported inside the response body.
    """
    logger.info("Scheduled monitoring triggered")

    run = await monitoring.run()
    fanout = await notifications.send_all_pending()

    return MonitorTriggerResponse(
        success=True,
        monitoring=run.to_dict(),
        notifications={channel: result.to_dict() for channel, result in fanout.items()},
        timestamp=datetime.now(UTC).isoformat(),
    )
