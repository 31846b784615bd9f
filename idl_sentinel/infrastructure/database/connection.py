"""Database connection and session management."""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from idl_sentinel.config import Settings, get_settings

# Global engine and session factory
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Get or create the async database engine."""
    global _engine

    if _engine is None:
        if settings is None:
            settings = get_settings()

        engine_kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.debug}
        # SQLite (tests, local runs) uses a static pool without sizing options
        if not settings.database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
            )

        _engine = create_async_engine(settings.database_url, **engine_kwargs)

    return _engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to an engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Get or create the async session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = create_session_factory(get_engine(settings))

    return _session_factory


# Type alias for dependency injection
AsyncSessionFactory = async_sessionmaker[AsyncSession]


async def init_db(settings: Settings | None = None) -> None:
    """Initialize database connection (call on startup)."""
    get_engine(settings)
    get_session_factory(settings)


async def close_db() -> None:
    """Close database connections (call on shutdown)."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None

