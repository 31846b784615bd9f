"""End-to-end monitoring and fan-out over SQLite and mocked HTTP."""

import json
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from idl_sentinel.application.services import MonitoringService
from idl_sentinel.container import Container
from idl_sentinel.domain.entities import InterfaceDefinition, MonitoredTarget
from idl_sentinel.infrastructure.database import create_session_factory
from idl_sentinel.infrastructure.database.models import (
    Base,
    SubscriberModel,
    WatchlistEntryModel,
)


def _definition(*instructions: str) -> InterfaceDefinition:
    return InterfaceDefinition.from_dict(
        {
            "name": "amm",
            "version": "0.1.0",
            "instructions": [
                {"name": name, "accounts": [{"name": "pool", "isMut": True}], "args": []}
                for name in instructions
            ],
        }
    )


class ScriptedReader:
    """Serves whatever definition is currently published per address."""

    def __init__(self):
        self.published: dict[str, InterfaceDefinition | None] = {}

    async def fetch(self, target_address: str) -> InterfaceDefinition | None:
        return self.published.get(target_address)


class Receiver:
    """Records webhook posts; URLs containing 'down' answer 500."""

    def __init__(self):
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "down" in str(request.url):
            return httpx.Response(500, text="unavailable")
        return httpx.Response(200, text="ok")

    def bodies_for(self, url: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if str(r.url) == url]


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def receiver() -> Receiver:
    return Receiver()


@pytest_asyncio.fixture
async def container(settings, session_factory, receiver):
    client = httpx.AsyncClient(transport=httpx.MockTransport(receiver))
    built = Container.build(
        settings.model_copy(update={"telegram_bot_token": ""}), session_factory, client
    )
    try:
        yield built
    finally:
        await built.aclose()


async def _seed(session_factory, container, subscribers: dict[str, str]) -> MonitoredTarget:
    target = MonitoredTarget(id=uuid4(), address="AmmProgram1111", name="Amm")
    async with container.uow_factory() as uow:
        await uow.targets.add(target)

    async with session_factory() as session:
        for wallet, url in subscribers.items():
            subscriber = SubscriberModel(wallet_address=wallet, webhook_url=url)
            session.add(subscriber)
            await session.flush()
            session.add(WatchlistEntryModel(subscriber_id=subscriber.id, target_id=target.id))
        await session.commit()
    return target


def _use_reader(container: Container, reader: ScriptedReader) -> None:
    container.monitoring_service = MonitoringService(container.uow_factory, reader)


class TestContainer:
    def test_channels_follow_configuration(self, settings, session_factory):
        with_bot = Container.build(settings, session_factory, httpx.AsyncClient())
        without_bot = Container.build(
            settings.model_copy(update={"telegram_bot_token": ""}),
            session_factory,
            httpx.AsyncClient(),
        )

        assert with_bot.notification_service.channels == ["webhook", "telegram"]
        assert without_bot.notification_service.channels == ["webhook"]


class TestMonitorAndNotify:
    """Test a full monitor then fan-out cycle."""

    @pytest.mark.asyncio
    async def test_first_run_then_change(self, container, session_factory, receiver):
        target = await _seed(
            session_factory,
            container,
            {"wallet-a": "https://hooks.test/a", "wallet-b": "https://hooks.test/down"},
        )
        reader = ScriptedReader()
        _use_reader(container, reader)

        reader.published[target.address] = _definition("swap", "close_pool")
        first = await container.monitoring_service.run()

        assert first.checked == 1
        assert first.snapshots_created == 1
        assert first.changes_detected == 1  # initial observation
        assert first.errors == []

        fanout = await container.notification_service.send_all_pending()
        assert fanout["webhook"].sent == 1
        assert fanout["webhook"].failed == 1
        assert len(receiver.bodies_for("https://hooks.test/a")) == 1

        unchanged = await container.monitoring_service.run()
        assert unchanged.snapshots_created == 0
        assert unchanged.changes_detected == 0

        reader.published[target.address] = _definition("swap")
        changed = await container.monitoring_service.run()
        assert changed.snapshots_created == 1
        assert changed.changes_detected == 1

        async with container.uow_factory() as uow:
            latest = await uow.snapshots.get_latest(target.id)
            pending = await uow.changes.list_pending("webhook")
        assert latest.version_number == 2
        assert [c.change_type for c in pending] == ["instruction_removed"]
        assert pending[0].severity == "critical"

        await container.notification_service.send_pending("webhook")
        messages = receiver.bodies_for("https://hooks.test/a")
        assert len(messages) == 2
        assert "close_pool" in json.dumps(messages[1]["blocks"])

        # Everything already notified
        again = await container.notification_service.send_pending("webhook")
        assert again.sent == 0
        assert len(receiver.bodies_for("https://hooks.test/a")) == 2

    @pytest.mark.asyncio
    async def test_unwatched_changes_are_cleared(self, container, session_factory, receiver):
        target = await _seed(session_factory, container, {})
        reader = ScriptedReader()
        reader.published[target.address] = _definition("swap")
        _use_reader(container, reader)

        await container.monitoring_service.run()
        result = await container.notification_service.send_pending("webhook")

        assert result.sent == 0
        assert receiver.requests == []
        async with container.uow_factory() as uow:
            assert await uow.changes.list_pending("webhook") == []

    @pytest.mark.asyncio
    async def test_undelivered_changes_stay_pending(self, container, session_factory):
        target = await _seed(session_factory, container, {"wallet": "https://hooks.test/down"})
        reader = ScriptedReader()
        reader.published[target.address] = _definition("swap")
        _use_reader(container, reader)

        await container.monitoring_service.run()
        result = await container.notification_service.send_pending("webhook")

        assert result.failed == 1
        async with container.uow_factory() as uow:
            assert len(await uow.changes.list_pending("webhook")) == 1

    @pytest.mark.asyncio
    async def test_run_logs_are_persisted(self, container, session_factory):
        await _seed(session_factory, container, {})
        _use_reader(container, ScriptedReader())

        result = await container.monitoring_service.run()

        async with container.uow_factory() as uow:
            logs = await uow.logs.list_by_run(result.run_id)
        messages = [log.message for log in logs]
        assert messages[0] == "Starting IDL monitoring run"
        assert messages[-1].startswith("Monitoring run completed. Programs: 1")
        assert result.not_found == 1
