"""Operator commands: schema creation, role changes, demo data, serving.

Usage:
    mpl-admin create-schema
    mpl-admin promote alice@example.com
    mpl-admin promote alice@example.com --role user
    mpl-admin seed --teams 100 --fixtures 1000
    mpl-admin serve --port 4000
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
from collections.abc import Awaitable, Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mpl.auth.service import set_user_role
from mpl.config import Settings, get_settings
from mpl.database import create_engine
from mpl.db.base import Base
from mpl.db.models import ROLE_ADMIN, ROLE_USER
from mpl.errors import AppError
from mpl.middleware.logging import setup_logging
from mpl.seed import seed_fixtures, seed_teams

logger = structlog.get_logger()


async def _with_session(settings: Settings, work: Callable[[AsyncSession], Awaitable[None]]) -> None:
    engine = create_engine(settings)
    try:
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as db:
            await work(db)
            await db.commit()
    finally:
        await engine.dispose()


async def create_schema(settings: Settings) -> None:
    """Create all tables that do not exist yet."""
    engine = create_engine(settings)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()
    logger.info("schema_created")


async def promote(settings: Settings, email: str, role: str) -> None:
    """Set a user's role."""

    async def work(db: AsyncSession) -> None:
        await set_user_role(db, email, role)

    await _with_session(settings, work)


async def seed(settings: Settings, teams: int, fixtures: int, seed_value: int | None) -> None:
    """Insert generated teams and fixtures."""
    rng = random.Random(seed_value)

    async def work(db: AsyncSession) -> None:
        await seed_teams(db, teams, rng)
        await seed_fixtures(db, fixtures, rng)

    await _with_session(settings, work)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mpl-admin",
        description="MPL API operator commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("create-schema", help="Create database tables")

    p_promote = sub.add_parser("promote", help="Change a user's role")
    p_promote.add_argument("email")
    p_promote.add_argument("--role", choices=[ROLE_ADMIN, ROLE_USER], default=ROLE_ADMIN)

    p_seed = sub.add_parser("seed", help="Insert generated teams and fixtures")
    p_seed.add_argument("--teams", type=int, default=100)
    p_seed.add_argument("--fixtures", type=int, default=1000)
    p_seed.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")

    p_serve = sub.add_parser("serve", help="Run the API with uvicorn")
    p_serve.add_argument("--host", default="0.0.0.0")  # noqa: S104
    p_serve.add_argument("--port", type=int, default=4000)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("mpl.main:create_app", factory=True, host=args.host, port=args.port)
        return 0

    try:
        if args.command == "create-schema":
            asyncio.run(create_schema(settings))
        elif args.command == "promote":
            asyncio.run(promote(settings, args.email, args.role))
        elif args.command == "seed":
            asyncio.run(seed(settings, args.teams, args.fixtures, args.seed))
    except AppError as e:
        print(f"error: {e.message}", file=sys.stderr)  # noqa: T201
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
