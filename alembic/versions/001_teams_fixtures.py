"""Users, teams and fixtures.

Creates the three tables with the uniqueness rules the services rely on:
unique usernames and emails, unique normalized team names, and one fixture
per (home team, away team, date).

Revision ID: 001_teams_fixtures
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_teams_fixtures"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users, teams and fixtures."""
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("role", sa.String(16), server_default="user", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.execute("ALTER TABLE users ADD CONSTRAINT ck_users_role CHECK (role IN ('admin', 'user'))")

    op.create_table(
        "teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("name_normalized", sa.String(128), nullable=False),
        sa.Column("country", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("name_normalized", name="uq_teams_name_normalized"),
    )

    op.create_table(
        "fixtures",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("home_team_id", sa.String(36), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("away_team_id", sa.String(36), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(256), nullable=False),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("home_team_score", sa.Integer(), server_default="0", nullable=False),
        sa.Column("away_team_score", sa.Integer(), server_default="0", nullable=False),
        sa.Column("unique_link", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("home_team_id", "away_team_id", "date", name="uq_fixtures_opponents_date"),
        sa.UniqueConstraint("unique_link", name="uq_fixtures_unique_link"),
    )
    op.execute(
        "ALTER TABLE fixtures ADD CONSTRAINT ck_fixtures_status "
        "CHECK (status IN ('pending', 'completed'))"
    )
    op.create_index("ix_fixtures_home_team_id", "fixtures", ["home_team_id"])
    op.create_index("ix_fixtures_away_team_id", "fixtures", ["away_team_id"])
    op.create_index("ix_fixtures_date", "fixtures", ["date"])


def downgrade() -> None:
    """Drop fixtures, teams and users."""
    op.drop_table("fixtures")
    op.drop_table("teams")
    op.drop_table("users")
