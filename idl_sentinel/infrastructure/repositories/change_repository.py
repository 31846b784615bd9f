"""Change record repository implementation."""

from collections.abc import Sequence
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select, update

from idl_sentinel.domain.entities import CHANNELS, ChangeRecord, NotificationChannel
from idl_sentinel.infrastructure.database.models import ChangeRecordModel
from idl_sentinel.infrastructure.repositories.base import BaseRepository


def _flag_columns(channel: NotificationChannel):
    if channel not in CHANNELS:
        raise ValueError(f"Unknown notification channel: {channel}")
    return (
        getattr(ChangeRecordModel, f"{channel}_notified"),
        f"{channel}_notified",
        f"{channel}_notified_at",
    )


class ChangeRepositoryImpl(BaseRepository[ChangeRecordModel, ChangeRecord]):
    """SQLAlchemy implementation of ChangeRepository."""

    model_class = ChangeRecordModel

    async def create_many(self, changes: Sequence[ChangeRecord]) -> list[ChangeRecord]:
        """Persist detected changes in one flush."""
        models = [ChangeRecordModel.from_entity(change) for change in changes]
        self.session.add_all(models)
        await self.session.flush()
        return [model.to_entity() for model in models]

    async def list_pending(self, channel: NotificationChannel) -> list[ChangeRecord]:
        """List changes not yet notified on a channel, oldest first."""
        flag, _, _ = _flag_columns(channel)
        stmt = (
            select(ChangeRecordModel)
            .where(flag.is_(False))
            .order_by(ChangeRecordModel.detected_at, ChangeRecordModel.id)
        )
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]

    async def mark_notified(
        self, change_ids: Sequence[UUID], channel: NotificationChannel
    ) -> int:
        """Set the channel flag on the given changes that are still pending.

        Rows already notified keep their original timestamp.
        """
        if not change_ids:
            return 0
        flag, flag_name, at_name = _flag_columns(channel)
        stmt = (
            update(ChangeRecordModel)
            .where(ChangeRecordModel.id.in_(list(change_ids)), flag.is_(False))
            .values({flag_name: True, at_name: datetime.now(UTC)})
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0
