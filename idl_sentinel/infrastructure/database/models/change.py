"""Change record database model."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from idl_sentinel.domain.entities import ChangeDetail, ChangeRecord
from idl_sentinel.infrastructure.database.models.base import Base, JSONType, utcnow


class ChangeRecordModel(Base):
    """SQLAlchemy model for change_records table."""

    __tablename__ = "change_records"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    target_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("monitored_targets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    old_snapshot_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("definition_snapshots.id", ondelete="SET NULL"),
        nullable=True,
    )
    new_snapshot_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("definition_snapshots.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Classification
    change_type: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    detected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    # Per-channel notification state
    webhook_notified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    webhook_notified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    telegram_notified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    telegram_notified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def to_entity(self) -> ChangeRecord:
        """Convert to domain entity."""
        return ChangeRecord(
            id=self.id,
            target_id=self.target_id,
            old_snapshot_id=self.old_snapshot_id,
            new_snapshot_id=self.new_snapshot_id,
            change_type=self.change_type,  # type: ignore
            severity=self.severity,  # type: ignore
            summary=self.summary,
            detail=ChangeDetail.from_dict(self.details),
            detected_at=self.detected_at,
            webhook_notified=self.webhook_notified,
            webhook_notified_at=self.webhook_notified_at,
            telegram_notified=self.telegram_notified,
            telegram_notified_at=self.telegram_notified_at,
        )

    @classmethod
    def from_entity(cls, entity: ChangeRecord) -> "ChangeRecordModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            target_id=entity.target_id,
            old_snapshot_id=entity.old_snapshot_id,
            new_snapshot_id=entity.new_snapshot_id,
            change_type=entity.change_type,
            severity=entity.severity,
            summary=entity.summary,
            details=entity.detail.to_dict(),
            detected_at=entity.detected_at,
            webhook_notified=entity.webhook_notified,
            webhook_notified_at=entity.webhook_notified_at,
            telegram_notified=entity.telegram_notified,
            telegram_notified_at=entity.telegram_notified_at,
        )
