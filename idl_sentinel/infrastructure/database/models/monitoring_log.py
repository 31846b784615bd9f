"""Monitoring log database model."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from idl_sentinel.domain.entities import MonitoringLog
from idl_sentinel.infrastructure.database.models.base import Base, JSONType, utcnow


class MonitoringLogModel(Base):
    """SQLAlchemy model for monitoring_logs table."""

    __tablename__ = "monitoring_logs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    run_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    target_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("monitored_targets.id", ondelete="SET NULL"),
        nullable=True,
    )
    level: Mapped[str] = mapped_column(String(10), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    log_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONType, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    def to_entity(self) -> MonitoringLog:
        """Convert to domain entity."""
        return MonitoringLog(
            id=self.id,
            run_id=self.run_id,
            level=self.level,  # type: ignore
            message=self.message,
            target_id=self.target_id,
            metadata=self.log_metadata or {},
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, entity: MonitoringLog) -> "MonitoringLogModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            run_id=entity.run_id,
            target_id=entity.target_id,
            level=entity.level,
            message=entity.message,
            log_metadata=entity.metadata,
            created_at=entity.created_at,
        )
