"""Repository protocols - abstract interfaces for data access."""

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Protocol
from uuid import UUID

from idl_sentinel.domain.entities import (
    ChangeRecord,
    InterfaceDefinition,
    MonitoredTarget,
    MonitoringLog,
    NotificationChannel,
    Snapshot,
    SubscriberEndpoint,
)


class TargetRepository(Protocol):
    """Abstract interface for monitored target data access."""

    async def get_by_id(self, target_id: UUID) -> MonitoredTarget | None:
        """Get target by ID."""
        ...

    async def list_active(self) -> list[MonitoredTarget]:
        """List all targets that should be polled."""
        ...

    async def get_many(self, target_ids: Sequence[UUID]) -> dict[UUID, MonitoredTarget]:
        """Get several targets keyed by ID."""
        ...


class SnapshotRepository(Protocol):
    """Abstract interface for definition snapshot data access."""

    async def exists(self, target_id: UUID, content_hash: str) -> bool:
        """Check if a snapshot with this hash was already captured."""
        ...

    async def create(
        self,
        target_id: UUID,
        content_hash: str,
        definition: InterfaceDefinition,
    ) -> Snapshot:
        """Persist a new snapshot with the next version number for the target."""
        ...

    async def get_latest(self, target_id: UUID) -> Snapshot | None:
        """Get the snapshot with the highest version number."""
        ...


class ChangeRepository(Protocol):
    """Abstract interface for change record data access."""

    async def create_many(self, changes: Sequence[ChangeRecord]) -> list[ChangeRecord]:
        """Persist detected changes."""
        ...

    async def list_pending(self, channel: NotificationChannel) -> list[ChangeRecord]:
        """List changes not yet notified on a channel, oldest first."""
        ...

    async def mark_notified(
        self, change_ids: Sequence[UUID], channel: NotificationChannel
    ) -> int:
        """Set the channel flag on changes still pending; returns rows updated."""
        ...


class WatchlistRepository(Protocol):
    """Read-only view of subscriber interest, populated externally."""

    async def list_subscribers(
        self, target_id: UUID, channel: NotificationChannel
    ) -> list[SubscriberEndpoint]:
        """Subscribers watching a target who have the channel configured."""
        ...


class MonitoringLogRepository(Protocol):
    """Abstract interface for persisted monitoring events."""

    async def add(self, log: MonitoringLog) -> None:
        """Persist a monitoring event."""
        ...

    async def list_by_run(self, run_id: str) -> list[MonitoringLog]:
        """List events of one run in order."""
        ...


class UnitOfWork(Protocol):
    """A transactional scope exposing the repositories.

    Entering the context starts a transaction; a clean exit commits and an
    exception rolls back.
    """

    targets: TargetRepository
    snapshots: SnapshotRepository
    changes: ChangeRepository
    watchlist: WatchlistRepository
    logs: MonitoringLogRepository

    async def __aenter__(self) -> "UnitOfWork": ...

    async def __aexit__(self, *exc_info: Any) -> None: ...


UnitOfWorkFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
