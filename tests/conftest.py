"""Shared test fixtures.

Tests run against a throwaway SQLite file and fakeredis, so neither PostgreSQL
nor a Redis server is needed. Each app gets its own fake server.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any

import fakeredis
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from mpl.auth.service import set_user_role
from mpl.config import Settings
from mpl.database import close_db, get_engine, init_db
from mpl.db.base import Base
from mpl.main import create_app

DEFAULT_PASSWORD = "secret123"


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:  # noqa: ANN401
    values: dict[str, Any] = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'mpl_test.db'}",
        "jwt_secret": "test-secret",
        "environment": "test",
        "log_format": "console",
        "rate_limit_requests": 10_000,
    }
    values.update(overrides)
    return Settings(**values)


async def start_app(settings: Settings) -> FastAPI:
    """Create the app and do what the lifespan would, with fakeredis for Redis."""
    app = create_app(settings)
    await init_db(app, settings)
    async with get_engine(app).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.state.redis = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    return app


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    application = await start_app(settings)
    yield application
    await close_db(application)


@pytest.fixture
def redis(app: FastAPI) -> fakeredis.FakeAsyncRedis:
    fake: fakeredis.FakeAsyncRedis = app.state.redis
    return fake


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for service tests and assertions."""
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def new_client(app: FastAPI) -> AsyncGenerator[Callable[[], Awaitable[AsyncClient]], None]:
    """Factory for additional clients, each with its own cookie jar."""
    async with AsyncExitStack() as stack:

        async def factory() -> AsyncClient:
            ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
            return await stack.enter_async_context(ac)

        yield factory


async def _register(client: AsyncClient, username: str, email: str, password: str) -> None:
    response = await client.post(
        "/api/auth/sign-up",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text


async def _login(client: AsyncClient, email: str, password: str) -> str:
    """Log in, keep the session cookie in the client jar and set the bearer header."""
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    token: str = response.json()["data"]["token"]
    client.headers["Authorization"] = f"Bearer {token}"
    return token


async def _promote(app: FastAPI, email: str) -> None:
    async with app.state.session_factory() as session:
        await set_user_role(session, email, "admin")
        await session.commit()


@pytest.fixture
def register_and_login(
    app: FastAPI,
) -> Callable[..., Awaitable[str]]:
    """Register a user on ``client``, optionally promote them, then log in."""

    async def _do(
        client: AsyncClient,
        username: str,
        email: str,
        *,
        admin: bool = False,
        password: str = DEFAULT_PASSWORD,
    ) -> str:
        await _register(client, username, email, password)
        if admin:
            await _promote(app, email)
        return await _login(client, email, password)

    return _do


@pytest_asyncio.fixture
async def user_client(
    client: AsyncClient,
    register_and_login: Callable[..., Awaitable[str]],
) -> AsyncClient:
    """Client logged in as a regular user."""
    await register_and_login(client, "regular", "regular@example.com")
    return client


@pytest_asyncio.fixture
async def admin_client(
    client: AsyncClient,
    register_and_login: Callable[..., Awaitable[str]],
) -> AsyncClient:
    """Client logged in as an admin."""
    await register_and_login(client, "boss", "boss@example.com", admin=True)
    return client


@pytest_asyncio.fixture
async def client_with(tmp_path: Path) -> AsyncGenerator[Callable[..., Awaitable[AsyncClient]], None]:
    """Factory for a client bound to a separate app built with overridden settings."""
    async with AsyncExitStack() as stack:
        counter = 0

        async def factory(**overrides: Any) -> AsyncClient:  # noqa: ANN401
            nonlocal counter
            counter += 1
            workdir = tmp_path / f"app{counter}"
            workdir.mkdir()
            application = await start_app(make_settings(workdir, **overrides))
            stack.push_async_callback(close_db, application)
            ac = AsyncClient(transport=ASGITransport(app=application), base_url="http://test")
            return await stack.enter_async_context(ac)

        yield factory
