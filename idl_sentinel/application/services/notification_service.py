"""Notification service - fans pending changes out to subscribers per channel."""

from collections.abc import Mapping, Sequence
from uuid import UUID

from idl_sentinel.application.services.concurrency import bounded_map
from idl_sentinel.domain.entities import (
    ChangeRecord,
    FanoutResult,
    MonitoredTarget,
    SubscriberEndpoint,
)
from idl_sentinel.domain.errors import DeliveryError, ValidationError, to_app_error
from idl_sentinel.domain.protocols import ChannelSender, UnitOfWorkFactory
from idl_sentinel.infrastructure.telemetry import (
    channel_var,
    create_span,
    get_logger,
    record_delivery,
    record_exception,
    record_notification_group,
    target_id_var,
)

logger = get_logger(__name__)


class NotificationService:
    """Delivers pending change records, one aggregated message per target.

    A target's changes are marked notified on a channel once at least one
    subscriber received the message, or immediately when nobody watches the
    target on that channel. Notified changes are never sent again.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        senders: Mapping[str, ChannelSender],
        concurrency: int = 5,
        delivery_delay: float = 0.2,
    ):
        self._uow_factory = uow_factory
        self._senders = dict(senders)
        self._concurrency = concurrency
        self._delivery_delay = delivery_delay

    @property
    def channels(self) -> list[str]:
        return list(self._senders)

    def _sender(self, channel: str) -> ChannelSender:
        sender = self._senders.get(channel)
        if sender is None:
            raise ValidationError(
                message=f"Notification channel '{channel}' is not enabled",
                details={"channel": channel, "enabled": self.channels},
            )
        return sender

    async def send_pending(self, channel: str) -> FanoutResult:
        """Run one fan-out pass for a channel.

        Args:
            channel: Channel name (webhook, telegram)

        Returns:
            Counts of successful and failed deliveries plus collected errors
        """
        sender = self._sender(channel)
        channel_var.set(channel)
        result = FanoutResult(channel=channel)

        try:
            async with self._uow_factory() as uow:
                pending = await uow.changes.list_pending(channel)  # type: ignore[arg-type]
                groups: dict[UUID, list[ChangeRecord]] = {}
                for change in pending:
                    groups.setdefault(change.target_id, []).append(change)
                targets = await uow.targets.get_many(list(groups)) if groups else {}
        except Exception as exc:
            error = to_app_error(exc)
            record_exception(exc, {"channel": channel})
            logger.error(
                "Failed to load pending changes",
                extra={"channel": channel, "error_code": error.code, "error": error.message},
            )
            result.errors.append(error)
            return result

        if not groups:
            logger.info("No pending notifications", extra={"channel": channel})
            return result

        logger.info(
            "Sending pending notifications",
            extra={"channel": channel, "changes": len(pending), "targets": len(groups)},
        )

        for target_id, changes in groups.items():
            target_id_var.set(str(target_id))
            try:
                await self._send_group(sender, target_id, targets.get(target_id), changes, result)
            except Exception as exc:
                error = to_app_error(exc)
                result.errors.append(error)
                record_notification_group(channel, "error")
                record_exception(exc, {"channel": channel, "target_id": str(target_id)})
                logger.warning(
                    "Failed to process notification group",
                    extra={
                        "channel": channel,
                        "target_id": str(target_id),
                        "error_code": error.code,
                        "error": error.message,
                    },
                )

        logger.info(
            "Notification pass completed",
            extra={"channel": channel, "sent": result.sent, "failed": result.failed},
        )
        return result

    async def send_all_pending(
        self, channels: Sequence[str] | None = None
    ) -> dict[str, FanoutResult]:
        """Run the fan-out once for each enabled channel, in order."""
        results: dict[str, FanoutResult] = {}
        for channel in channels or self.channels:
            results[channel] = await self.send_pending(channel)
        return results

    async def send_test(self, channel: str, endpoint: str) -> bool:
        """Send a test message to verify a subscriber endpoint."""
        return await self._sender(channel).send_test(endpoint)

    async def _send_group(
        self,
        sender: ChannelSender,
        target_id: UUID,
        target: MonitoredTarget | None,
        changes: list[ChangeRecord],
        result: FanoutResult,
    ) -> None:
        channel = sender.channel
        change_ids = [change.id for change in changes]

        async with self._uow_factory() as uow:
            subscribers = await uow.watchlist.list_subscribers(target_id, channel)

        if target is None or not subscribers:
            async with self._uow_factory() as uow:
                await uow.changes.mark_notified(change_ids, channel)
            record_notification_group(channel, "no_subscribers")
            logger.info(
                "No subscribers for target, marking changes notified",
                extra={"channel": channel, "target_id": str(target_id), "changes": len(changes)},
            )
            return

        message = sender.render(target, changes)

        async def deliver(subscriber: SubscriberEndpoint) -> None:
            with create_span(
                "notification.deliver",
                {
                    "notification.channel": channel,
                    "target.id": str(target_id),
                    "subscriber.id": str(subscriber.subscriber_id),
                },
            ):
                await sender.deliver(subscriber, message)

        outcomes = await bounded_map(
            subscribers,
            deliver,
            limit=self._concurrency,
            delay_after=self._delivery_delay,
        )

        delivered = 0
        for outcome in outcomes:
            subscriber = outcome.item
            if outcome.ok:
                delivered += 1
                record_delivery(channel, "sent")
                continue

            error = _as_delivery_error(outcome.error, channel, subscriber)  # type: ignore[arg-type]
            result.failed += 1
            result.errors.append(error)
            record_delivery(channel, "failed")
            logger.warning(
                "Notification delivery failed",
                extra={
                    "channel": channel,
                    "target_id": str(target_id),
                    "subscriber_id": str(subscriber.subscriber_id),
                    "status_code": error.status_code,
                    "error": error.message,
                },
            )

        result.sent += delivered

        if delivered:
            async with self._uow_factory() as uow:
                await uow.changes.mark_notified(change_ids, channel)
            record_notification_group(channel, "notified")
            logger.info(
                "Notifications sent",
                extra={
                    "channel": channel,
                    "target_id": str(target_id),
                    "delivered": delivered,
                    "subscribers": len(subscribers),
                },
            )
        else:
            # Left pending for the next pass
            record_notification_group(channel, "undelivered")


def _as_delivery_error(
    exc: Exception, channel: str, subscriber: SubscriberEndpoint
) -> DeliveryError:
    if isinstance(exc, DeliveryError):
        return exc
    base = to_app_error(exc)
    return DeliveryError(
        message=base.message,
        details={"cause": base.code, **base.details},
        provider=channel,
        channel=channel,
        subscriber_id=str(subscriber.subscriber_id),
    )
