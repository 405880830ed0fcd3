"""Database connection management for Reeltrack.

This module provides factory functions for creating SQLAlchemy async engines
and session factories from the application's StorageConfig.

Example usage:
    >>> from reeltrack.config import StorageConfig
    >>> from reeltrack.database.connection import get_engine, get_session_factory
    >>>
    >>> config = StorageConfig(backend="sql", url="sqlite+aiosqlite:///reeltrack.db")
    >>> engine = get_engine(config)
    >>> SessionFactory = get_session_factory(engine)
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from reeltrack.config import StorageConfig


def get_engine(config: StorageConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from storage configuration.

    Args:
        config: Storage configuration containing URL and SQL echo preference.

    Returns:
        Configured AsyncEngine instance.
    """
    return create_async_engine(config.url, echo=config.echo)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine.

    Sessions use expire_on_commit=False so attributes stay readable after
    commit without triggering lazy loads in async code.

    Args:
        engine: AsyncEngine to bind sessions to.

    Returns:
        Configured async_sessionmaker that produces AsyncSession instances.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
