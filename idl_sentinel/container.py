"""Service wiring - builds the object graph from settings."""

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idl_sentinel.application.services import (
    DiffEngine,
    MonitoringService,
    NotificationService,
)
from idl_sentinel.config import Settings
from idl_sentinel.domain.protocols import ChannelSender, UnitOfWorkFactory
from idl_sentinel.infrastructure.notifications import TelegramSender, WebhookSender
from idl_sentinel.infrastructure.repositories import sqlalchemy_uow_factory
from idl_sentinel.infrastructure.solana import SolanaIdlReader, SolanaRpcClient


@dataclass
class Container:
    """Long-lived services shared by all requests."""

    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    http_client: httpx.AsyncClient
    uow_factory: UnitOfWorkFactory
    monitoring_service: MonitoringService
    notification_service: NotificationService

    @classmethod
    def build(
        cls,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        http_client: httpx.AsyncClient | None = None,
    ) -> "Container":
        """Wire services; one httpx client serves RPC and notification calls."""
        client = http_client or httpx.AsyncClient(timeout=settings.rpc_timeout_seconds)
        uow_factory = sqlalchemy_uow_factory(session_factory)

        reader = SolanaIdlReader(
            SolanaRpcClient(settings, client=client),
            max_attempts=settings.fetch_max_attempts,
            base_delay=settings.fetch_base_delay_seconds,
        )

        senders: dict[str, ChannelSender] = {"webhook": WebhookSender(settings, client=client)}
        if "telegram" in settings.enabled_channels:
            senders["telegram"] = TelegramSender(settings, client=client)

        return cls(
            settings=settings,
            session_factory=session_factory,
            http_client=client,
            uow_factory=uow_factory,
            monitoring_service=MonitoringService(
                uow_factory,
                reader,
                diff_engine=DiffEngine(settings.sensitive_instruction_keywords),
                concurrency=settings.monitor_concurrency,
            ),
            notification_service=NotificationService(
                uow_factory,
                senders,
                concurrency=settings.notification_concurrency,
                delivery_delay=settings.delivery_delay_seconds,
            ),
        )

    async def aclose(self) -> None:
        await self.http_client.aclose()
