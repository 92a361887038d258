"""FastAPI authentication dependencies.

A request is authenticated when it carries a valid bearer token *and* a live
server-side session owned by the same user. Admin-only endpoints add a role
check on top of that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn

import jwt
import structlog
from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis

from mpl.auth.jwt import verify_token
from mpl.auth.sessions import load_session
from mpl.config import Settings
from mpl.db.models import ROLE_ADMIN
from mpl.dependencies import get_app_settings, get_redis
from mpl.errors import BadRequestError, ForbiddenError, UnauthorizedError

logger = structlog.get_logger()

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, taken from the token claims."""

    id: int
    email: str
    role: str
    session_id: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _reject(request: Request, error: UnauthorizedError | BadRequestError | ForbiddenError) -> NoReturn:
    logger.info("auth_rejected", reason=error.reason, path=request.url.path, method=request.method)
    raise error


async def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_app_settings),
    redis: Redis = Depends(get_redis),  # type: ignore[assignment]
) -> Identity:
    """
    Verify the bearer token and the server-side session.

    Raises:
        UnauthorizedError: No token (``missing_token``) or no live session (``session_expired``).
        BadRequestError: Token present but invalid or expired (``invalid_token``).
    """
    if credentials is None:
        _reject(request, UnauthorizedError("Access denied", reason="missing_token"))

    try:
        payload = verify_token(settings, credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError:
        _reject(request, BadRequestError("Invalid token", reason="invalid_token"))

    session = await load_session(redis, request.cookies.get(settings.session_cookie_name))
    if session is None or session.user_id != int(payload["id"]):
        _reject(request, UnauthorizedError("Session expired, please log in again", reason="session_expired"))

    return Identity(
        id=int(payload["id"]),
        email=str(payload.get("email", "")),
        role=str(payload.get("role", "")),
        session_id=session.session_id,
    )


async def require_admin(
    request: Request,
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Same as get_current_identity but additionally requires role 'admin'."""
    if not identity.is_admin:
        _reject(request, ForbiddenError("Admin access required", reason="not_admin"))
    return identity
