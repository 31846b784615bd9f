"""Manual notification endpoints."""

from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from idl_sentinel.application.services import NotificationService
from idl_sentinel.presentation.http.dependencies import (
    get_notification_service,
    verify_cron_secret,
)

router = APIRouter(prefix="/notifications", dependencies=[Depends(verify_cron_secret)])


class SendNotificationsRequest(BaseModel):
    """Optional channel filter; all enabled channels when omitted."""

    channels: list[Literal["webhook", "telegram"]] | None = None


class SendNotificationsResponse(BaseModel):
    success: bool
    results: dict[str, dict[str, Any]]
    timestamp: str


class TestNotificationRequest(BaseModel):
    """Where the test message goes: a webhook URL or a Telegram chat id."""

    channel: Literal["webhook", "telegram"]
    endpoint: str = Field(..., min_length=1)


class TestNotificationResponse(BaseModel):
    success: bool
    channel: str


@router.post("/send", response_model=SendNotificationsResponse)
async def send_notifications(
    request: SendNotificationsRequest | None = None,
    notifications: NotificationService = Depends(get_notification_service),
) -> SendNotificationsResponse:
    """Deliver pending change notifications without running the monitor."""
    channels = request.channels if request else None
    results = await notifications.send_all_pending(channels)
    return SendNotificationsResponse(
        success=True,
        results={channel: result.to_dict() for channel, result in results.items()},
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.post("/test", response_model=TestNotificationResponse)
async def test_notification(
    request: TestNotificationRequest,
    notifications: NotificationService = Depends(get_notification_service),
) -> TestNotificationResponse:
    """Send a test message to verify a subscriber endpoint."""
    ok = await notifications.send_test(request.channel, request.endpoint)
    return TestNotificationResponse(success=ok, channel=request.channel)
