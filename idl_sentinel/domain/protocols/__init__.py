"""Domain protocols - abstract interfaces for infrastructure implementations."""

from idl_sentinel.domain.protocols.providers import (
    AccountLookupClient,
    ChannelSender,
    DefinitionReader,
)
from idl_sentinel.domain.protocols.repositories import (
    ChangeRepository,
    MonitoringLogRepository,
    SnapshotRepository,
    TargetRepository,
    UnitOfWork,
    UnitOfWorkFactory,
    WatchlistRepository,
)

__all__ = [
    # Repositories
    "TargetRepository",
    "SnapshotRepository",
    "ChangeRepository",
    "WatchlistRepository",
    "MonitoringLogRepository",
    "UnitOfWork",
    "UnitOfWorkFactory",
    # Providers
    "AccountLookupClient",
    "DefinitionReader",
    "ChannelSender",
]
