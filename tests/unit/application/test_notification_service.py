"""Tests for the notification fan-out."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from idl_sentinel.application.services import notification_service
from idl_sentinel.application.services.notification_service import NotificationService
from idl_sentinel.domain.entities import ChangeDetail, ChangeRecord
from idl_sentinel.domain.errors import DeliveryError, ValidationError


class FakeSender:
    """Records deliveries; endpoints listed in ``failing`` reject the message."""

    def __init__(self, channel: str = "webhook", failing=()):
        self._channel = channel
        self.failing = set(failing)
        self.delivered: list[tuple[str, object]] = []
        self.rendered: list[tuple[str, int]] = []

    @property
    def channel(self) -> str:
        return self._channel

    def render(self, target, changes):
        self.rendered.append((target.name, len(changes)))
        return {"target": target.name, "count": len(changes)}

    async def deliver(self, subscriber, message) -> None:
        if subscriber.endpoint in self.failing:
            raise DeliveryError(
                message="endpoint returned 500",
                channel=self._channel,
                subscriber_id=str(subscriber.subscriber_id),
                status_code=500,
            )
        if subscriber.endpoint == "explode":
            raise RuntimeError("socket closed")
        self.delivered.append((subscriber.endpoint, message))

    async def send_test(self, endpoint: str) -> bool:
        return endpoint not in self.failing


def _add_change(store, target, severity="high", summary="Type 'Pool' removed") -> ChangeRecord:
    change = ChangeRecord(
        id=uuid4(),
        target_id=target.id,
        new_snapshot_id=uuid4(),
        old_snapshot_id=uuid4(),
        change_type="type_removed",
        severity=severity,
        summary=summary,
        detail=ChangeDetail(change_type="type_removed", item_name="Pool", description=""),
    )
    store.changes[change.id] = change
    return change


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def service(store, sender) -> NotificationService:
    return NotificationService(
        store.uow, {"webhook": sender}, concurrency=2, delivery_delay=0.0
    )


class TestSendPending:
    """Test NotificationService.send_pending."""

    @pytest.mark.asyncio
    async def test_no_pending_changes(self, service):
        result = await service.send_pending("webhook")

        assert (result.sent, result.failed, result.errors) == (0, 0, [])

    @pytest.mark.asyncio
    async def test_one_message_per_target(self, store, sender, service):
        target = store.add_target("amm")
        _add_change(store, target)
        _add_change(store, target, severity="low", summary="New type 'X' added")
        store.subscribe(target.id, "webhook", "https://a.example")

        result = await service.send_pending("webhook")

        assert result.sent == 1
        assert sender.rendered == [("amm", 2)]
        assert all(c.webhook_notified for c in store.changes.values())
        assert not any(c.telegram_notified for c in store.changes.values())

    @pytest.mark.asyncio
    async def test_partial_delivery_marks_notified(self, store, sender, service):
        target = store.add_target("amm")
        change = _add_change(store, target)
        store.subscribe(target.id, "webhook", "https://ok.example")
        failing = store.subscribe(target.id, "webhook", "https://broken.example")
        sender.failing.add("https://broken.example")

        result = await service.send_pending("webhook")

        assert result.sent == 1
        assert result.failed == 1
        assert len(result.errors) == 1
        assert result.errors[0].subscriber_id == str(failing.subscriber_id)
        assert result.errors[0].status_code == 500
        assert change.webhook_notified is True

    @pytest.mark.asyncio
    async def test_all_deliveries_failing_leaves_pending(self, store, sender, service):
        target = store.add_target("amm")
        change = _add_change(store, target)
        store.subscribe(target.id, "webhook", "https://broken.example")
        sender.failing.add("https://broken.example")

        result = await service.send_pending("webhook")

        assert result.sent == 0
        assert result.failed == 1
        assert change.webhook_notified is False

    @pytest.mark.asyncio
    async def test_unexpected_delivery_exception_becomes_delivery_error(
        self, store, service
    ):
        target = store.add_target("amm")
        _add_change(store, target)
        store.subscribe(target.id, "webhook", "explode")

        result = await service.send_pending("webhook")

        assert result.failed == 1
        assert isinstance(result.errors[0], DeliveryError)
        assert result.errors[0].message == "socket closed"

    @pytest.mark.asyncio
    async def test_zero_subscribers_marks_notified(self, store, sender, service):
        target = store.add_target("amm")
        change = _add_change(store, target)

        result = await service.send_pending("webhook")

        assert result.sent == 0
        assert result.errors == []
        assert sender.delivered == []
        assert change.webhook_notified is True

    @pytest.mark.asyncio
    async def test_notified_changes_are_never_resent(self, store, sender, service):
        target = store.add_target("amm")
        _add_change(store, target)
        store.subscribe(target.id, "webhook", "https://a.example")
        await service.send_pending("webhook")

        store.subscribe(target.id, "webhook", "https://late.example")
        result = await service.send_pending("webhook")

        assert result.sent == 0
        assert [endpoint for endpoint, _ in sender.delivered] == ["https://a.example"]

    @pytest.mark.asyncio
    async def test_targets_are_isolated(self, store, sender, service):
        good = store.add_target("good")
        bad = store.add_target("bad")
        _add_change(store, bad)
        good_change = _add_change(store, good)
        store.subscribe(bad.id, "webhook", "https://broken.example")
        store.subscribe(good.id, "webhook", "https://ok.example")
        sender.failing.add("https://broken.example")

        result = await service.send_pending("webhook")

        assert result.sent == 1
        assert result.failed == 1
        assert good_change.webhook_notified is True

    @pytest.mark.asyncio
    async def test_load_failure_is_collected_and_recorded(self, store, service, monkeypatch):
        recorder = MagicMock()
        monkeypatch.setattr(notification_service, "record_exception", recorder)

        async def broken_list_pending(self, channel):
            raise ConnectionError("changes table unavailable")

        monkeypatch.setattr(type(store.uow().changes), "list_pending", broken_list_pending)

        result = await service.send_pending("webhook")

        assert result.sent == 0
        assert result.errors[0].code == "UNEXPECTED_ERROR"
        recorder.assert_called_once()
        exc, attributes = recorder.call_args.args
        assert isinstance(exc, ConnectionError)
        assert attributes == {"channel": "webhook"}

    @pytest.mark.asyncio
    async def test_unknown_channel_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.send_pending("telegram")


class TestSendAllPending:
    @pytest.mark.asyncio
    async def test_channels_are_independent(self, store):
        webhook = FakeSender("webhook")
        telegram = FakeSender("telegram", failing={"42"})
        service = NotificationService(
            store.uow, {"webhook": webhook, "telegram": telegram}, delivery_delay=0.0
        )
        target = store.add_target("amm")
        change = _add_change(store, target)
        store.subscribe(target.id, "webhook", "https://a.example")
        store.subscribe(target.id, "telegram", "42")

        results = await service.send_all_pending()

        assert set(results) == {"webhook", "telegram"}
        assert results["webhook"].sent == 1
        assert results["telegram"].failed == 1
        assert change.webhook_notified is True
        assert change.telegram_notified is False


class TestSendTest:
    @pytest.mark.asyncio
    async def test_delegates_to_sender(self, service, sender):
        sender.failing.add("https://broken.example")

        assert await service.send_test("webhook", "https://ok.example") is True
        assert await service.send_test("webhook", "https://broken.example") is False
