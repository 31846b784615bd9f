"""Definition snapshot repository implementation."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import func, select

from idl_sentinel.domain.entities import InterfaceDefinition, Snapshot
from idl_sentinel.infrastructure.database.models import DefinitionSnapshotModel
from idl_sentinel.infrastructure.repositories.base import BaseRepository


class SnapshotRepositoryImpl(BaseRepository[DefinitionSnapshotModel, Snapshot]):
    """SQLAlchemy implementation of SnapshotRepository."""

    model_class = DefinitionSnapshotModel

    async def exists(self, target_id: UUID, content_hash: str) -> bool:
        """Check if any snapshot of the target has this content hash."""
        stmt = (
            select(DefinitionSnapshotModel.id)
            .where(
                DefinitionSnapshotModel.target_id == target_id,
                DefinitionSnapshotModel.content_hash == content_hash,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(
        self,
        target_id: UUID,
        content_hash: str,
        definition: InterfaceDefinition,
    ) -> Snapshot:
        """Persist a snapshot numbered one past the target's highest version."""
        stmt = select(func.coalesce(func.max(DefinitionSnapshotModel.version_number), 0)).where(
            DefinitionSnapshotModel.target_id == target_id
        )
        current = (await self.session.execute(stmt)).scalar_one()

        snapshot = Snapshot(
            id=uuid4(),
            target_id=target_id,
            content_hash=content_hash,
            definition=definition,
            version_number=int(current) + 1,
            fetched_at=datetime.now(UTC),
        )
        return await self.add(snapshot)

    async def get_latest(self, target_id: UUID) -> Snapshot | None:
        """Get the snapshot with the highest version number."""
        stmt = (
            select(DefinitionSnapshotModel)
            .where(DefinitionSnapshotModel.target_id == target_id)
            .order_by(DefinitionSnapshotModel.version_number.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return model.to_entity()
