"""Definition snapshot database model."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from idl_sentinel.domain.entities import InterfaceDefinition, Snapshot
from idl_sentinel.infrastructure.database.models.base import Base, JSONType, utcnow


class DefinitionSnapshotModel(Base):
    """SQLAlchemy model for definition_snapshots table.

    Append-only. The (target_id, content_hash) index is deliberately not
    unique: racing runs may each insert the same hash.
    """

    __tablename__ = "definition_snapshots"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    target_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("monitored_targets.id", ondelete="CASCADE"),
        nullable=False,
    )
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    definition: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("ix_definition_snapshots_target_hash", "target_id", "content_hash"),
        Index("ix_definition_snapshots_target_version", "target_id", "version_number"),
    )

    def to_entity(self) -> Snapshot:
        """Convert to domain entity."""
        return Snapshot(
            id=self.id,
            target_id=self.target_id,
            content_hash=self.content_hash,
            definition=InterfaceDefinition.from_dict(self.definition),
            version_number=self.version_number,
            fetched_at=self.fetched_at,
        )

    @classmethod
    def from_entity(cls, entity: Snapshot) -> "DefinitionSnapshotModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            target_id=entity.target_id,
            content_hash=entity.content_hash,
            definition=entity.definition.to_dict(),
            version_number=entity.version_number,
            fetched_at=entity.fetched_at,
        )
