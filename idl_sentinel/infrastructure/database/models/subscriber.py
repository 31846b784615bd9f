"""Subscriber and watch-list database models.

Both tables are written by the subscriber management UI; this service only
reads them.
"""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from idl_sentinel.infrastructure.database.models.base import Base, TimestampMixin


class SubscriberModel(Base, TimestampMixin):
    """SQLAlchemy model for subscribers table."""

    __tablename__ = "subscribers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    wallet_address: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    webhook_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    telegram_chat_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    watchlist = relationship("WatchlistEntryModel", back_populates="subscriber")


class WatchlistEntryModel(Base, TimestampMixin):
    """SQLAlchemy model for watchlist_entries table."""

    __tablename__ = "watchlist_entries"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    subscriber_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("subscribers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    target_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("monitored_targets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    subscriber = relationship("SubscriberModel", back_populates="watchlist")

    __table_args__ = (
        UniqueConstraint("subscriber_id", "target_id", name="watchlist_subscriber_target_unique"),
    )
