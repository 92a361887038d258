"""
Fixture business logic.

Fixtures reference their teams by ID, but clients name teams by name; every
write resolves the names first. The (home, away, date) triple is unique.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from mpl.db.models import FIXTURE_PENDING, Fixture, Team
from mpl.errors import BadRequestError, NotFoundError
from mpl.search import Page, PageRequest, contains, paginate
from mpl.teams.service import get_team_by_name

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULT_SORT = "date"
SORT_COLUMNS = {
    "date": Fixture.date,
    "location": Fixture.location,
    "status": Fixture.status,
    "homeTeamScore": Fixture.home_team_score,
    "awayTeamScore": Fixture.away_team_score,
}

_WITH_TEAMS = (selectinload(Fixture.home_team), selectinload(Fixture.away_team))
_FIXTURE_EXISTS = "Fixture already exists"


def build_unique_link(fixture_id: str) -> str:
    """Stable public link for a fixture, derived from its ID."""
    return f"fixture/{fixture_id}"


async def _resolve_team(db: AsyncSession, name: str, side: str) -> Team:
    team = await get_team_by_name(db, name)
    if team is None:
        msg = f"{side} team does not exist"
        raise NotFoundError(msg)
    return team


async def get_fixture(db: AsyncSession, fixture_id: str) -> Fixture | None:
    """Fetch a fixture by ID with both teams loaded."""
    result = await db.execute(
        select(Fixture)
        .where(Fixture.id == fixture_id)
        .options(*_WITH_TEAMS)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_duplicate_fixture(
    db: AsyncSession,
    home_team_id: str,
    away_team_id: str,
    date: datetime,
    exclude_id: str | None = None,
) -> Fixture | None:
    """Return a fixture with the same opponents and date, if any."""
    query = (
        select(Fixture)
        .where(Fixture.home_team_id == home_team_id)
        .where(Fixture.away_team_id == away_team_id)
        .where(Fixture.date == date)
    )
    if exclude_id is not None:
        query = query.where(Fixture.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def _flush_or_duplicate(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise BadRequestError(_FIXTURE_EXISTS) from e


async def create_fixture(
    db: AsyncSession,
    home_team: str,
    away_team: str,
    date: datetime,
    location: str,
    status: str = FIXTURE_PENDING,
) -> Fixture:
    """
    Create a fixture between two existing teams.

    Raises:
        NotFoundError: If the home or away team name does not resolve.
        BadRequestError: If both names resolve to the same team, or a fixture
            with the same opponents and date already exists.
    """
    home = await _resolve_team(db, home_team, "Home")
    away = await _resolve_team(db, away_team, "Away")
    if home.id == away.id:
        msg = "Home and away teams must be different"
        raise BadRequestError(msg)

    if await find_duplicate_fixture(db, home.id, away.id, date) is not None:
        raise BadRequestError(_FIXTURE_EXISTS)

    fixture = Fixture(
        id=str(uuid.uuid4()),
        home_team=home,
        away_team=away,
        date=date,
        location=location,
        status=status,
        home_team_score=0,
        away_team_score=0,
        created_at=datetime.now(timezone.utc),
    )
    fixture.unique_link = build_unique_link(fixture.id)
    db.add(fixture)
    await _flush_or_duplicate(db)

    logger.info("fixture_created", fixture_id=fixture.id, home=home.name, away=away.name)
    return fixture


async def update_fixture(
    db: AsyncSession,
    fixture_id: str,
    *,
    home_team: str | None = None,
    away_team: str | None = None,
    date: datetime | None = None,
    location: str | None = None,
    status: str | None = None,
    home_team_score: int | None = None,
    away_team_score: int | None = None,
) -> Fixture:
    """
    Apply a partial update to a fixture.

    Supplied team names are re-resolved. The duplicate check only runs when
    the resolved opponents differ from the current ones; otherwise only the
    schema constraint guards against a collision.

    Raises:
        NotFoundError: If the fixture or a named team does not exist.
        BadRequestError: If the update would duplicate another fixture.
    """
    fixture = await get_fixture(db, fixture_id)
    if fixture is None:
        msg = "Fixture not found"
        raise NotFoundError(msg)

    home = await _resolve_team(db, home_team, "Home") if home_team is not None else fixture.home_team
    away = await _resolve_team(db, away_team, "Away") if away_team is not None else fixture.away_team
    if home.id == away.id:
        msg = "Home and away teams must be different"
        raise BadRequestError(msg)

    new_date = date if date is not None else fixture.date
    opponents_changed = (home.id, away.id) != (fixture.home_team_id, fixture.away_team_id)
    if opponents_changed:
        duplicate = await find_duplicate_fixture(db, home.id, away.id, new_date, exclude_id=fixture.id)
        if duplicate is not None:
            raise BadRequestError(_FIXTURE_EXISTS)

    fixture.home_team = home
    fixture.away_team = away
    fixture.date = new_date
    if location is not None:
        fixture.location = location
    if status is not None:
        fixture.status = status
    if home_team_score is not None:
        fixture.home_team_score = home_team_score
    if away_team_score is not None:
        fixture.away_team_score = away_team_score
    fixture.updated_at = datetime.now(timezone.utc)

    await _flush_or_duplicate(db)
    logger.info("fixture_updated", fixture_id=fixture.id, opponents_changed=opponents_changed)
    return fixture


async def remove_fixture(db: AsyncSession, fixture_id: str) -> None:
    """Delete a fixture by ID. Deleting an unknown ID is a no-op."""
    result = await db.execute(delete(Fixture).where(Fixture.id == fixture_id))
    await db.flush()
    logger.info("fixture_removed", fixture_id=fixture_id, deleted=result.rowcount)


async def _matching_team_ids(db: AsyncSession, name: str) -> list[str]:
    result = await db.execute(select(Team.id).where(contains(Team.name, name)))
    return list(result.scalars().all())


async def search_fixtures(
    db: AsyncSession,
    page_request: PageRequest,
    home_team_name: str | None = None,
    away_team_name: str | None = None,
    status: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> Page[Fixture]:
    """
    Search fixtures by team names, status and an inclusive date range.

    Team names match case-insensitively as substrings. A name that matches no
    team makes the whole search match nothing rather than being ignored.
    """
    conditions: list[ColumnElement[bool]] = []
    if home_team_name:
        conditions.append(Fixture.home_team_id.in_(await _matching_team_ids(db, home_team_name)))
    if away_team_name:
        conditions.append(Fixture.away_team_id.in_(await _matching_team_ids(db, away_team_name)))
    if status:
        conditions.append(Fixture.status == status)
    if start_date is not None:
        conditions.append(Fixture.date >= start_date)
    if end_date is not None:
        conditions.append(Fixture.date <= end_date)

    return await paginate(db, Fixture, conditions, page_request, SORT_COLUMNS, options=_WITH_TEAMS)
