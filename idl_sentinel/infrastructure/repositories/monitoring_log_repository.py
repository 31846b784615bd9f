"""Monitoring log repository implementation."""

from sqlalchemy import select

from idl_sentinel.domain.entities import MonitoringLog
from idl_sentinel.infrastructure.database.models import MonitoringLogModel
from idl_sentinel.infrastructure.repositories.base import BaseRepository


class MonitoringLogRepositoryImpl(BaseRepository[MonitoringLogModel, MonitoringLog]):
    """SQLAlchemy implementation of MonitoringLogRepository."""

    model_class = MonitoringLogModel

    async def add(self, log: MonitoringLog) -> None:  # type: ignore[override]
        """Persist a monitoring event."""
        self.session.add(MonitoringLogModel.from_entity(log))
        await self.session.flush()

    async def list_by_run(self, run_id: str) -> list[MonitoringLog]:
        """List events of one run in creation order."""
        stmt = (
            select(MonitoringLogModel)
            .where(MonitoringLogModel.run_id == run_id)
            .order_by(MonitoringLogModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]
