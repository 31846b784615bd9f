"""Repository implementations - SQLAlchemy adapters for domain protocols."""

from idl_sentinel.infrastructure.repositories.change_repository import ChangeRepositoryImpl
from idl_sentinel.infrastructure.repositories.monitoring_log_repository import (
    MonitoringLogRepositoryImpl,
)
from idl_sentinel.infrastructure.repositories.snapshot_repository import SnapshotRepositoryImpl
from idl_sentinel.infrastructure.repositories.target_repository import TargetRepositoryImpl
from idl_sentinel.infrastructure.repositories.unit_of_work import (
    SqlAlchemyUnitOfWork,
    sqlalchemy_uow_factory,
)
from idl_sentinel.infrastructure.repositories.watchlist_repository import (
    WatchlistRepositoryImpl,
)

__all__ = [
    "TargetRepositoryImpl",
    "SnapshotRepositoryImpl",
    "ChangeRepositoryImpl",
    "WatchlistRepositoryImpl",
    "MonitoringLogRepositoryImpl",
    "SqlAlchemyUnitOfWork",
    "sqlalchemy_uow_factory",
]
