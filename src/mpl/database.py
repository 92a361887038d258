"""Async SQLAlchemy engine and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mpl.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Build the async engine with explicit pool and command timeouts."""
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)

    connect_args: dict[str, Any] = {}
    if url.startswith("postgresql+asyncpg"):
        connect_args = {
            "statement_cache_size": 0,
            "command_timeout": settings.db_command_timeout_seconds,
        }
    return create_async_engine(
        url,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
        pool_timeout=settings.db_pool_timeout_seconds,
        echo=False,
        connect_args=connect_args,
    )


async def init_db(app: FastAPI, settings: Settings) -> None:
    """Initialize the database engine and session factory on the app state."""
    engine = create_engine(settings)
    app.state.db_engine = engine
    app.state.session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def close_db(app: FastAPI) -> None:
    """Dispose of the database engine."""
    engine: AsyncEngine | None = getattr(app.state, "db_engine", None)
    if engine is not None:
        await engine.dispose()
        app.state.db_engine = None
        app.state.session_factory = None


def get_engine(app: FastAPI) -> AsyncEngine:
    """Get the async engine instance."""
    engine: AsyncEngine | None = getattr(app.state, "db_engine", None)
    if engine is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return engine


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    factory: async_sessionmaker[AsyncSession] | None = getattr(request.app.state, "session_factory", None)
    if factory is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    async with factory() as session:
        yield session
