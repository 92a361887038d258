"""Demo data: generated teams and fixtures for local development."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mpl.db.models import FIXTURE_COMPLETED, FIXTURE_PENDING, Fixture, Team
from mpl.fixtures.service import build_unique_link
from mpl.teams.service import normalize_name

logger = structlog.get_logger()

_CITIES = [
    "Aldridge", "Bramford", "Castlebay", "Dunmore", "Eastwick", "Fairhaven", "Glenrock",
    "Harrowgate", "Ironbridge", "Kingsport", "Lakeside", "Marlow", "Northfield", "Oakham",
    "Porthaven", "Queensbury", "Riverton", "Stonebridge", "Thornbury", "Westmoor",
]
_SUFFIXES = ["United", "City", "Rovers", "Athletic", "Wanderers", "Albion", "Town", "Rangers"]
_COUNTRIES = ["England", "Scotland", "Wales", "Ireland", "France", "Spain", "Portugal", "Netherlands"]
_VENUES = ["Park", "Road", "Lane", "Stadium", "Ground", "Arena"]


def generate_team_names(count: int, rng: random.Random) -> list[str]:
    """Distinct "<City> <Suffix>" names, at most one per combination."""
    combos = [f"{city} {suffix}" for city in _CITIES for suffix in _SUFFIXES]
    rng.shuffle(combos)
    return combos[:count]


async def seed_teams(db: AsyncSession, count: int, rng: random.Random) -> list[Team]:
    """Insert up to ``count`` teams whose names are not taken yet."""
    existing = set((await db.execute(select(Team.name_normalized))).scalars().all())
    teams = []
    for name in generate_team_names(count, rng):
        if normalize_name(name) in existing:
            continue
        team = Team(name=name, name_normalized=normalize_name(name), country=rng.choice(_COUNTRIES))
        db.add(team)
        teams.append(team)
    await db.flush()
    logger.info("teams_seeded", count=len(teams))
    return teams


async def seed_fixtures(db: AsyncSession, count: int, rng: random.Random) -> int:
    """Insert up to ``count`` fixtures between distinct, randomly paired teams."""
    teams = list((await db.execute(select(Team))).scalars().all())
    if len(teams) < 2:
        return 0

    now = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    existing = await db.execute(select(Fixture.home_team_id, Fixture.away_team_id, Fixture.date))
    seen: set[tuple[str, str, datetime]] = {tuple(row) for row in existing.all()}  # type: ignore[misc]
    created = 0
    for _ in range(count):
        home, away = rng.sample(teams, 2)
        date = now + timedelta(days=rng.randint(-180, 365), hours=rng.choice([12, 15, 18, 20]) - now.hour)
        key = (home.id, away.id, date)
        if key in seen:
            continue
        seen.add(key)

        completed = date < now
        fixture_id = str(uuid.uuid4())
        db.add(
            Fixture(
                id=fixture_id,
                home_team_id=home.id,
                away_team_id=away.id,
                date=date,
                location=f"{home.name.split()[0]} {rng.choice(_VENUES)}",
                status=FIXTURE_COMPLETED if completed else FIXTURE_PENDING,
                home_team_score=rng.randint(0, 5) if completed else 0,
                away_team_score=rng.randint(0, 5) if completed else 0,
                unique_link=build_unique_link(fixture_id),
            )
        )
        created += 1
    await db.flush()
    logger.info("fixtures_seeded", count=created)
    return created
