"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mpl.auth.router import router as auth_router
from mpl.config import Settings, get_settings
from mpl.database import close_db, init_db
from mpl.fixtures.router import router as fixtures_router
from mpl.health.router import router as health_router
from mpl.middleware import setup_middleware
from mpl.redis_client import close_redis, init_redis
from mpl.teams.router import router as teams_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database and Redis pools for the lifetime of the app."""
    settings: Settings = app.state.settings
    await init_db(app, settings)
    await init_redis(app, settings)

    yield

    await close_db(app)
    await close_redis(app)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="MPL API",
        description="Teams and fixtures with session-backed, role-gated access",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(teams_router)
    app.include_router(fixtures_router)

    return app
