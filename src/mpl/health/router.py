"""Liveness, readiness and version endpoints. None of them require a login."""

from collections.abc import Awaitable, Callable

import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from mpl.config import Settings
from mpl.database import get_session
from mpl.dependencies import get_app_settings
from mpl.redis_client import get_app_redis

logger = structlog.get_logger()

router = APIRouter()


async def _probe(name: str, check: Callable[[], Awaitable[object]]) -> str:
    try:
        await check()
    except Exception as exc:  # noqa: BLE001
        logger.warning("readiness_check_failed", check=name, error=str(exc))
        return "error"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """The process is up."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    request: Request,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Report whether the database and the session store answer."""

    async def database() -> None:
        await db.execute(text("SELECT 1"))

    async def session_store() -> None:
        await get_app_redis(request.app).ping()

    checks = {
        "database": await _probe("database", database),
        "redis": await _probe("redis", session_store),
    }
    ready = all(state == "ok" for state in checks.values())
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    return {"version": settings.app_version, "environment": settings.environment}
