"""Pytest configuration and fixtures."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import pytest
from unittest.mock import AsyncMock

from idl_sentinel.config import Settings
from idl_sentinel.domain.entities import (
    ChangeRecord,
    InterfaceDefinition,
    MonitoredTarget,
    MonitoringLog,
    Snapshot,
    SubscriberEndpoint,
)


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(
        environment="test",
        database_url="sqlite+aiosqlite:///:memory:",
        telegram_bot_token="123:test-token",
        cron_secret="test-cron-secret",
        fetch_base_delay_seconds=0.0,
        delivery_delay_seconds=0.0,
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def mock_db_session():
    """Mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


# --- IDL documents ---


def make_idl(
    name: str = "amm",
    version: str = "0.1.0",
    instructions: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a minimal legacy-format Anchor IDL document."""
    doc: dict[str, Any] = {
        "version": version,
        "name": name,
        "instructions": instructions
        if instructions is not None
        else [
            {
                "name": "swap",
                "accounts": [{"name": "pool", "isMut": True, "isSigner": False}],
                "args": [{"name": "amount", "type": "u64"}],
            }
        ],
    }
    doc.update(extra)
    return doc


@pytest.fixture
def idl_factory():
    """Factory for IDL documents."""
    return make_idl


@pytest.fixture
def definition_factory():
    """Factory for parsed interface definitions."""

    def factory(**kwargs: Any) -> InterfaceDefinition:
        return InterfaceDefinition.from_dict(make_idl(**kwargs))

    return factory


@pytest.fixture
def target() -> MonitoredTarget:
    return MonitoredTarget(
        id=uuid4(),
        address="11111111111111111111111111111111",
        name="System Program",
    )


# --- In-memory persistence ---


class FakeStore:
    """Shared in-memory state behind the fake units of work."""

    def __init__(self) -> None:
        self.targets: dict[UUID, MonitoredTarget] = {}
        self.snapshots: list[Snapshot] = []
        self.changes: dict[UUID, ChangeRecord] = {}
        self.subscribers: dict[tuple[UUID, str], list[SubscriberEndpoint]] = {}
        self.logs: list[MonitoringLog] = []
        self.fail_list_active = False
        self.fail_snapshot_create = False
        self.fail_log_add = False

    def add_target(self, name: str = "program", address: str | None = None) -> MonitoredTarget:
        target = MonitoredTarget(
            id=uuid4(),
            address=address or f"{name}-address-{len(self.targets)}",
            name=name,
        )
        self.targets[target.id] = target
        return target

    def subscribe(self, target_id: UUID, channel: str, endpoint: str) -> SubscriberEndpoint:
        subscriber = SubscriberEndpoint(
            subscriber_id=uuid4(), channel=channel, endpoint=endpoint, label="wallet"
        )
        self.subscribers.setdefault((target_id, channel), []).append(subscriber)
        return subscriber

    def snapshots_for(self, target_id: UUID) -> list[Snapshot]:
        return [s for s in self.snapshots if s.target_id == target_id]

    def uow(self) -> "FakeUnitOfWork":
        return FakeUnitOfWork(self)


class _Targets:
    def __init__(self, store: FakeStore):
        self.store = store

    async def get_by_id(self, target_id: UUID) -> MonitoredTarget | None:
        return self.store.targets.get(target_id)

    async def list_active(self) -> list[MonitoredTarget]:
        if self.store.fail_list_active:
            raise ConnectionError("database unavailable")
        return [t for t in self.store.targets.values() if t.is_active]

    async def get_many(self, target_ids: Sequence[UUID]) -> dict[UUID, MonitoredTarget]:
        return {i: self.store.targets[i] for i in target_ids if i in self.store.targets}


class _Snapshots:
    def __init__(self, store: FakeStore):
        self.store = store

    async def exists(self, target_id: UUID, content_hash: str) -> bool:
        return any(s.content_hash == content_hash for s in self.store.snapshots_for(target_id))

    async def create(
        self, target_id: UUID, content_hash: str, definition: InterfaceDefinition
    ) -> Snapshot:
        if self.store.fail_snapshot_create:
            raise RuntimeError("insert failed")
        versions = [s.version_number for s in self.store.snapshots_for(target_id)]
        snapshot = Snapshot(
            id=uuid4(),
            target_id=target_id,
            content_hash=content_hash,
            definition=definition,
            version_number=max(versions, default=0) + 1,
        )
        self.store.snapshots.append(snapshot)
        return snapshot

    async def get_latest(self, target_id: UUID) -> Snapshot | None:
        snapshots = self.store.snapshots_for(target_id)
        return max(snapshots, key=lambda s: s.version_number) if snapshots else None


class _Changes:
    def __init__(self, store: FakeStore):
        self.store = store

    async def create_many(self, changes: Sequence[ChangeRecord]) -> list[ChangeRecord]:
        for change in changes:
            self.store.changes[change.id] = change
        return list(changes)

    async def list_pending(self, channel: str) -> list[ChangeRecord]:
        pending = [c for c in self.store.changes.values() if not c.is_notified(channel)]
        return sorted(pending, key=lambda c: c.detected_at)

    async def mark_notified(self, change_ids: Sequence[UUID], channel: str) -> int:
        now = datetime.now(UTC)
        return sum(
            1 for i in change_ids if self.store.changes[i].mark_notified(channel, now)
        )


class _Watchlist:
    def __init__(self, store: FakeStore):
        self.store = store

    async def list_subscribers(self, target_id: UUID, channel: str) -> list[SubscriberEndpoint]:
        return list(self.store.subscribers.get((target_id, channel), []))


class _Logs:
    def __init__(self, store: FakeStore):
        self.store = store

    async def add(self, log: MonitoringLog) -> None:
        if self.store.fail_log_add:
            raise RuntimeError("log table unavailable")
        self.store.logs.append(log)

    async def list_by_run(self, run_id: str) -> list[MonitoringLog]:
        return [log for log in self.store.logs if log.run_id == run_id]


class FakeUnitOfWork:
    def __init__(self, store: FakeStore):
        self.targets = _Targets(store)
        self.snapshots = _Snapshots(store)
        self.changes = _Changes(store)
        self.watchlist = _Watchlist(store)
        self.logs = _Logs(store)

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


@pytest.fixture
def store() -> FakeStore:
    """In-memory store; pass ``store.uow`` as the unit-of-work factory."""
    return FakeStore()
