"""Monitored target database model."""

from uuid import UUID, uuid4

from sqlalchemy import Boolean, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from idl_sentinel.domain.entities import MonitoredTarget
from idl_sentinel.infrastructure.database.models.base import Base, TimestampMixin


class MonitoredTargetModel(Base, TimestampMixin):
    """SQLAlchemy model for monitored_targets table."""

    __tablename__ = "monitored_targets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    address: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    def to_entity(self) -> MonitoredTarget:
        """Convert to domain entity."""
        return MonitoredTarget(
            id=self.id,
            address=self.address,
            name=self.name,
            description=self.description,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: MonitoredTarget) -> "MonitoredTargetModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            address=entity.address,
            name=entity.name,
            description=entity.description,
            is_active=entity.is_active,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
