"""Database session management for the pet hotel reservation service."""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from core.config import settings


def normalize_database_url(url: str) -> str:
    """Ensure an async driver is used."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///") or url == "sqlite://":
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def create_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    In-memory SQLite gets a StaticPool so every session shares the single
    connection that holds the database.

    Args:
        url: Database URL (defaults to settings)
        echo: Whether to log all SQL statements

    Returns:
        Async SQLAlchemy engine
    """
    url = normalize_database_url(url or settings.database_url)
    echo = settings.db_echo if echo is None else echo

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.endswith("sqlite+aiosqlite://"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(url, echo=echo, **kwargs)

    return create_async_engine(url, echo=echo, pool_pre_ping=True)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory with the service's session defaults."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Global engine instance
engine: AsyncEngine = create_engine()

# Async session factory
AsyncSessionLocal = create_session_factory(engine)


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Initialize database by creating all tables."""
    from .base import Base
    from . import models_sqlalchemy  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: Optional[AsyncEngine] = None) -> None:
    """Drop all database tables. Use with caution!"""
    from .base import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_db(bind: Optional[AsyncEngine] = None) -> None:
    """Close database engine and all connections."""
    await (bind or engine).dispose()
