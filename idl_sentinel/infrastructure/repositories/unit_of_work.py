"""SQLAlchemy unit of work - one session, one transaction, all repositories."""

from functools import partial
from types import TracebackType

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idl_sentinel.domain.errors import PersistenceError
from idl_sentinel.domain.protocols import UnitOfWorkFactory
from idl_sentinel.infrastructure.repositories.change_repository import ChangeRepositoryImpl
from idl_sentinel.infrastructure.repositories.monitoring_log_repository import (
    MonitoringLogRepositoryImpl,
)
from idl_sentinel.infrastructure.repositories.snapshot_repository import SnapshotRepositoryImpl
from idl_sentinel.infrastructure.repositories.target_repository import TargetRepositoryImpl
from idl_sentinel.infrastructure.repositories.watchlist_repository import (
    WatchlistRepositoryImpl,
)
from idl_sentinel.infrastructure.telemetry import get_logger

logger = get_logger(__name__)


class SqlAlchemyUnitOfWork:
    """Transactional scope over a fresh session.

    A clean exit commits; an exception rolls back. Store failures surface as
    PersistenceError so callers never see driver exceptions.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self.targets = TargetRepositoryImpl(self._session)
        self.snapshots = SnapshotRepositoryImpl(self._session)
        self.changes = ChangeRepositoryImpl(self._session)
        self.watchlist = WatchlistRepositoryImpl(self._session)
        self.logs = MonitoringLogRepositoryImpl(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self._session
        assert session is not None
        try:
            if exc is not None:
                await session.rollback()
                if isinstance(exc, SQLAlchemyError):
                    raise PersistenceError(
                        message="Database operation failed",
                        details={"error": str(exc)},
                        operation="transaction",
                    ) from exc
                return
            try:
                await session.commit()
            except SQLAlchemyError as commit_exc:
                await session.rollback()
                logger.error("Commit failed", extra={"error": str(commit_exc)})
                raise PersistenceError(
                    message="Failed to commit transaction",
                    details={"error": str(commit_exc)},
                    operation="commit",
                ) from commit_exc
        finally:
            await session.close()
            self._session = None


def sqlalchemy_uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> UnitOfWorkFactory:
    """Build a factory producing a new unit of work per call."""
    return partial(SqlAlchemyUnitOfWork, session_factory)  # type: ignore[return-value]
