"""Database infrastructure - connection, models, and session management."""

from idl_sentinel.infrastructure.database.connection import (
    AsyncSessionFactory,
    close_db,
    create_session_factory,
    get_engine,
    get_session_factory,
    init_db,
)

__all__ = [
    "init_db",
    "close_db",
    "get_engine",
    "get_session_factory",
    "create_session_factory",
    "AsyncSessionFactory",
]
