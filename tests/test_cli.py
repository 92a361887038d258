"""Tests for the operator CLI and demo-data seeding."""

import random

import pytest
from sqlalchemy import func, select

from mpl.cli import create_schema, parse_args, promote, seed
from mpl.db.models import Fixture, Team, User
from mpl.errors import NotFoundError
from mpl.seed import generate_team_names, seed_fixtures, seed_teams


class TestParseArgs:
    def test_promote_defaults_to_admin(self):
        args = parse_args(["promote", "alice@example.com"])
        assert args.command == "promote"
        assert args.email == "alice@example.com"
        assert args.role == "admin"

    def test_promote_demote(self):
        args = parse_args(["promote", "alice@example.com", "--role", "user"])
        assert args.role == "user"

    def test_unknown_role_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["promote", "alice@example.com", "--role", "owner"])

    def test_seed_counts(self):
        args = parse_args(["seed", "--teams", "5", "--fixtures", "20", "--seed", "7"])
        assert (args.teams, args.fixtures, args.seed) == (5, 20, 7)

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestSeedData:
    def test_team_names_are_distinct(self):
        names = generate_team_names(50, random.Random(1))
        assert len(names) == 50
        assert len({n.lower() for n in names}) == 50

    async def test_seed_teams_and_fixtures(self, db_session):
        rng = random.Random(42)
        teams = await seed_teams(db_session, 6, rng)
        created = await seed_fixtures(db_session, 15, rng)
        await db_session.commit()

        assert len(teams) == 6
        assert 0 < created <= 15
        fixtures = (await db_session.execute(select(Fixture))).scalars().all()
        assert len(fixtures) == created
        for fixture in fixtures:
            assert fixture.home_team_id != fixture.away_team_id
            assert fixture.unique_link == f"fixture/{fixture.id}"

    async def test_seed_teams_skips_existing_names(self, db_session):
        await seed_teams(db_session, 4, random.Random(3))
        again = await seed_teams(db_session, 4, random.Random(3))
        assert again == []

    async def test_no_fixtures_without_two_teams(self, db_session):
        assert await seed_fixtures(db_session, 10, random.Random(0)) == 0


class TestCommands:
    async def test_promote_existing_user(self, client, settings, db_session):
        await client.post(
            "/api/auth/sign-up",
            json={"username": "erin", "email": "erin@example.com", "password": "secret123"},
        )
        await promote(settings, "Erin@Example.com", "admin")

        user = (await db_session.execute(select(User).where(User.email == "erin@example.com"))).scalar_one()
        assert user.role == "admin"

    async def test_promote_unknown_user(self, app, settings):
        with pytest.raises(NotFoundError):
            await promote(settings, "nobody@example.com", "admin")

    async def test_create_schema_is_idempotent(self, app, settings):
        await create_schema(settings)
        await create_schema(settings)

    async def test_seed_command(self, app, settings, db_session):
        await seed(settings, teams=3, fixtures=5, seed_value=1)
        count = (await db_session.execute(select(func.count()).select_from(Team))).scalar_one()
        assert count == 3
