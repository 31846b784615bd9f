"""SQLAlchemy database models."""

from idl_sentinel.infrastructure.database.models.base import Base, JSONType, TimestampMixin
from idl_sentinel.infrastructure.database.models.change import ChangeRecordModel
from idl_sentinel.infrastructure.database.models.monitoring_log import MonitoringLogModel
from idl_sentinel.infrastructure.database.models.snapshot import DefinitionSnapshotModel
from idl_sentinel.infrastructure.database.models.subscriber import (
    SubscriberModel,
    WatchlistEntryModel,
)
from idl_sentinel.infrastructure.database.models.target import MonitoredTargetModel

__all__ = [
    "Base",
    "JSONType",
    "TimestampMixin",
    # Monitoring
    "MonitoredTargetModel",
    "DefinitionSnapshotModel",
    "ChangeRecordModel",
    "MonitoringLogModel",
    # Subscribers (read-only)
    "SubscriberModel",
    "WatchlistEntryModel",
]
