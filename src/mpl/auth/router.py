"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, Response
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from mpl.auth.jwt import create_access_token
from mpl.auth.schemas import LoginRequest, RegisterRequest, TokenData
from mpl.auth.service import authenticate_user, register_user
from mpl.auth.sessions import create_session, destroy_session
from mpl.config import Settings
from mpl.database import get_session
from mpl.dependencies import get_app_settings, get_redis
from mpl.responses import SuccessResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/sign-up", status_code=201, response_model=SuccessResponse[None])
async def sign_up(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> SuccessResponse[None]:
    """Register a new account with the 'user' role."""
    await register_user(db, settings, body.username, body.email, body.password)
    await db.commit()
    return SuccessResponse[None](message="User registered successfully")


@router.post("/login", status_code=201, response_model=SuccessResponse[TokenData])
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
    redis: Redis = Depends(get_redis),  # type: ignore[assignment]
    settings: Settings = Depends(get_app_settings),
) -> SuccessResponse[TokenData]:
    """Check credentials, issue a bearer token and open a server-side session."""
    user = await authenticate_user(db, body.email, body.password)
    await db.commit()

    token = create_access_token(settings, user.id, user.email, user.role)
    session = await create_session(redis, user.id, user.role, settings.session_ttl_seconds)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
    )
    logger.info("user_logged_in", user_id=user.id, role=user.role)
    return SuccessResponse[TokenData](message="Login successful", data=TokenData(token=token))


@router.post("/logout", response_model=SuccessResponse[None])
async def logout(
    request: Request,
    response: Response,
    redis: Redis = Depends(get_redis),  # type: ignore[assignment]
    settings: Settings = Depends(get_app_settings),
) -> SuccessResponse[None]:
    """Destroy the current session (if any) and clear the session cookie."""
    await destroy_session(redis, request.cookies.get(settings.session_cookie_name))
    response.delete_cookie(settings.session_cookie_name)
    return SuccessResponse[None](message="Logout successful")
