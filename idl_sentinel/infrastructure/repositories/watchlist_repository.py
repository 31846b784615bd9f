"""Watch-list repository implementation (read-only)."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from idl_sentinel.domain.entities import NotificationChannel, SubscriberEndpoint
from idl_sentinel.infrastructure.database.models import SubscriberModel, WatchlistEntryModel

_ENDPOINT_COLUMNS = {
    "webhook": SubscriberModel.webhook_url,
    "telegram": SubscriberModel.telegram_chat_id,
}


class WatchlistRepositoryImpl:
    """Resolves a target's subscribers for one channel."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_subscribers(
        self, target_id: UUID, channel: NotificationChannel
    ) -> list[SubscriberEndpoint]:
        """Subscribers watching the target who configured an endpoint for the channel."""
        column = _ENDPOINT_COLUMNS.get(channel)
        if column is None:
            raise ValueError(f"Unknown notification channel: {channel}")

        stmt = (
            select(SubscriberModel.id, SubscriberModel.wallet_address, column)
            .join(WatchlistEntryModel, WatchlistEntryModel.subscriber_id == SubscriberModel.id)
            .where(
                WatchlistEntryModel.target_id == target_id,
                column.is_not(None),
                column != "",
            )
            .order_by(WatchlistEntryModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [
            SubscriberEndpoint(
                subscriber_id=subscriber_id,
                channel=channel,
                endpoint=endpoint,
                label=wallet_address,
            )
            for subscriber_id, wallet_address, endpoint in result.all()
        ]
