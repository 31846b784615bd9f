"""FastAPI dependencies resolving services from the app container."""

from fastapi import Depends, Header, Request

from idl_sentinel.application.services import MonitoringService, NotificationService
from idl_sentinel.config import Settings
from idl_sentinel.container import Container
from idl_sentinel.domain.errors import TriggerUnauthorizedError


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_container(request: Request) -> Container:
    """The container built during application startup."""
    return request.app.state.container


def get_monitoring_service(container: Container = Depends(get_container)) -> MonitoringService:
    return container.monitoring_service


def get_notification_service(
    container: Container = Depends(get_container),
) -> NotificationService:
    return container.notification_service


async def verify_cron_secret(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Require ``Authorization: Bearer <cron_secret>``.

    Without a configured secret the trigger is open outside production and
    closed in production.
    """
    if not settings.cron_secret:
        if settings.is_production:
            raise TriggerUnauthorizedError(message="Scheduler trigger secret is not configured")
        return

    if authorization != f"Bearer {settings.cron_secret}":
        raise TriggerUnauthorizedError(message="Unauthorized")
