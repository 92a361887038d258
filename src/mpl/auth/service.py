"""
Authentication business logic.

Handles user registration, credential checks and role changes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from mpl.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from mpl.db.models import ROLE_ADMIN, ROLE_USER, User
from mpl.errors import BadRequestError, NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from mpl.config import Settings

logger = structlog.get_logger()

VALID_ROLES = frozenset({ROLE_ADMIN, ROLE_USER})


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower().strip()))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by username (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.username) == username.lower().strip()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    settings: Settings,
    username: str,
    email: str,
    password: str,
) -> User:
    """
    Register a new user with role 'user'.

    Raises:
        BadRequestError: If the email or username is taken, or the password is too weak.
    """
    try:
        validate_password_strength(password, settings.password_min_length, settings.password_max_length)
    except PasswordStrengthError as e:
        raise BadRequestError(str(e)) from e

    if await get_user_by_email(db, email) is not None:
        msg = "User with email already exists"
        raise BadRequestError(msg)

    if await get_user_by_username(db, username) is not None:
        msg = "User with username already exists"
        raise BadRequestError(msg)

    user = User(
        username=username.strip(),
        email=email.lower().strip(),
        password_hash=hash_password(password),
        role=ROLE_USER,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "User with email or username already exists"
        raise BadRequestError(msg) from e

    logger.info("user_created", user_id=user.id, username=user.username)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Raises:
        BadRequestError: If the email is unknown or the password is wrong.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        msg = "Invalid credentials"
        raise BadRequestError(msg)

    user.last_login = datetime.now(timezone.utc)

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        logger.info("password_rehashed", user_id=user.id)

    await db.flush()
    return user


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


async def set_user_role(db: AsyncSession, email: str, role: str) -> User:
    """
    Change a user's role. Takes effect at the user's next login.

    Raises:
        BadRequestError: If the role is unknown.
        NotFoundError: If no user has this email.
    """
    if role not in VALID_ROLES:
        msg = f"Role must be one of: {', '.join(sorted(VALID_ROLES))}"
        raise BadRequestError(msg)

    user = await get_user_by_email(db, email)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)

    previous = user.role
    user.role = role
    await db.flush()
    logger.info("user_role_changed", user_id=user.id, previous=previous, role=role)
    return user
