"""Team business logic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from mpl.db.models import Team
from mpl.errors import BadRequestError, NotFoundError
from mpl.search import Page, PageRequest, contains, paginate

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULT_SORT = "name"
SORT_COLUMNS = {
    "name": Team.name,
    "country": Team.country,
}

_TEAM_EXISTS = "Team already exists"


def normalize_name(name: str) -> str:
    """Key used for case-insensitive name uniqueness."""
    return name.strip().casefold()


async def get_team(db: AsyncSession, team_id: str) -> Team | None:
    """Fetch a team by ID."""
    result = await db.execute(select(Team).where(Team.id == team_id))
    return result.scalar_one_or_none()


async def get_team_by_name(db: AsyncSession, name: str) -> Team | None:
    """Fetch a team by name, ignoring case."""
    result = await db.execute(select(Team).where(Team.name_normalized == normalize_name(name)))
    return result.scalar_one_or_none()


async def add_team(db: AsyncSession, name: str, country: str) -> Team:
    """
    Create a team.

    Raises:
        BadRequestError: If a team with the same name (ignoring case) exists.
    """
    if await get_team_by_name(db, name) is not None:
        raise BadRequestError(_TEAM_EXISTS)

    team = Team(
        name=name.strip(),
        name_normalized=normalize_name(name),
        country=country.strip(),
        created_at=datetime.now(timezone.utc),
    )
    db.add(team)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise BadRequestError(_TEAM_EXISTS) from e

    logger.info("team_created", team_id=team.id, name=team.name)
    return team


async def update_team(
    db: AsyncSession,
    team_id: str,
    name: str | None = None,
    country: str | None = None,
) -> Team:
    """
    Apply a partial update to a team.

    The name uniqueness check only runs when the name actually changes
    (ignoring case).

    Raises:
        NotFoundError: If the team does not exist.
        BadRequestError: If the new name collides with another team.
    """
    team = await get_team(db, team_id)
    if team is None:
        msg = "Team does not exist"
        raise NotFoundError(msg)

    if name is not None:
        if normalize_name(name) != team.name_normalized:
            if await get_team_by_name(db, name) is not None:
                raise BadRequestError(_TEAM_EXISTS)
            team.name_normalized = normalize_name(name)
        team.name = name.strip()

    if country is not None:
        team.country = country.strip()

    team.updated_at = datetime.now(timezone.utc)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise BadRequestError(_TEAM_EXISTS) from e

    logger.info("team_updated", team_id=team.id)
    return team


async def remove_team(db: AsyncSession, team_id: str) -> None:
    """Delete a team by ID. Deleting an unknown ID is a no-op."""
    result = await db.execute(delete(Team).where(Team.id == team_id))
    await db.flush()
    logger.info("team_removed", team_id=team_id, deleted=result.rowcount)


async def search_teams(
    db: AsyncSession,
    page_request: PageRequest,
    name: str | None = None,
    country: str | None = None,
) -> Page[Team]:
    """Search teams by name and/or country (case-insensitive substring)."""
    conditions: list[ColumnElement[bool]] = []
    if name:
        conditions.append(contains(Team.name, name))
    if country:
        conditions.append(contains(Team.country, country))

    return await paginate(db, Team, conditions, page_request, SORT_COLUMNS)
