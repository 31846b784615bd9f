"""Monitored target repository implementation."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select

from idl_sentinel.domain.entities import MonitoredTarget
from idl_sentinel.infrastructure.database.models import MonitoredTargetModel
from idl_sentinel.infrastructure.repositories.base import BaseRepository


class TargetRepositoryImpl(BaseRepository[MonitoredTargetModel, MonitoredTarget]):
    """SQLAlchemy implementation of TargetRepository."""

    model_class = MonitoredTargetModel

    async def list_active(self) -> list[MonitoredTarget]:
        """List active targets, oldest registration first."""
        stmt = (
            select(MonitoredTargetModel)
            .where(MonitoredTargetModel.is_active.is_(True))
            .order_by(MonitoredTargetModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]

    async def get_many(self, target_ids: Sequence[UUID]) -> dict[UUID, MonitoredTarget]:
        """Get several targets keyed by ID; unknown IDs are left out."""
        if not target_ids:
            return {}
        stmt = select(MonitoredTargetModel).where(MonitoredTargetModel.id.in_(list(target_ids)))
        result = await self.session.execute(stmt)
        return {model.id: model.to_entity() for model in result.scalars().all()}
