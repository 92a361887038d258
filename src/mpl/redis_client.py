"""Redis connection pool."""

from __future__ import annotations

import redis.asyncio as redis
from fastapi import FastAPI, Request

from mpl.config import Settings


async def init_redis(app: FastAPI, settings: Settings) -> None:
    """Initialize the Redis connection pool on the app state."""
    app.state.redis = redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
        socket_timeout=settings.redis_socket_timeout_seconds,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
    )


async def close_redis(app: FastAPI) -> None:
    """Close the Redis connection pool."""
    pool: redis.Redis | None = getattr(app.state, "redis", None)
    if pool is not None:
        await pool.aclose()
        app.state.redis = None


def get_app_redis(app: FastAPI) -> redis.Redis:
    """Get the Redis client attached to an application."""
    pool: redis.Redis | None = getattr(app.state, "redis", None)
    if pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return pool


def get_redis(request: Request) -> redis.Redis:
    """Get the Redis client (FastAPI dependency)."""
    return get_app_redis(request.app)
