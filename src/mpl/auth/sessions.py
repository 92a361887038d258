"""
Server-side login sessions stored in Redis.

A session record is independent of the bearer token: logging out deletes the
record, which invalidates every token issued for it even before expiry.
Records carry a fixed TTL and are not refreshed by activity.
"""

from __future__ import annotations

import json
import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from redis.exceptions import RedisError

from mpl.errors import InternalServerError

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger()

_KEY_PREFIX = "session:"


@dataclass(frozen=True)
class SessionRecord:
    """What the server remembers about an active login."""

    session_id: str
    user_id: int
    role: str


def _key(session_id: str) -> str:
    return f"{_KEY_PREFIX}{session_id}"


async def create_session(redis: Redis, user_id: int, role: str, ttl_seconds: int) -> SessionRecord:
    """Create a session record and return it. The caller sets the cookie."""
    session_id = secrets.token_urlsafe(32)
    await redis.set(
        _key(session_id),
        json.dumps({"id": user_id, "role": role}),
        ex=ttl_seconds,
    )
    return SessionRecord(session_id=session_id, user_id=user_id, role=role)


async def load_session(redis: Redis, session_id: str | None) -> SessionRecord | None:
    """Fetch a session record, or None if it does not exist or has expired."""
    if not session_id:
        return None
    raw = await redis.get(_key(session_id))
    if raw is None:
        return None
    try:
        data = json.loads(raw)
        return SessionRecord(session_id=session_id, user_id=int(data["id"]), role=str(data["role"]))
    except (ValueError, KeyError, TypeError):
        logger.warning("session_record_corrupt", session_id=session_id)
        return None


async def destroy_session(redis: Redis, session_id: str | None) -> None:
    """
    Delete a session record. Deleting an absent session is a no-op.

    Raises:
        InternalServerError: If Redis cannot complete the deletion.
    """
    if not session_id:
        return
    try:
        await redis.delete(_key(session_id))
    except RedisError as e:
        logger.error("session_destroy_failed", error=str(e))
        msg = "Failed to log out"
        raise InternalServerError(msg) from e
