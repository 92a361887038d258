"""Request/response schemas for fixture endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal

from pydantic import Field, StringConstraints, field_validator

from mpl.schemas import CamelModel, PaginationResponse
from mpl.teams.schemas import TeamResponse

FixtureSortField = Literal["date", "location", "status", "homeTeamScore", "awayTeamScore"]

FixtureText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=256)]


class FixtureStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


def to_utc(v: datetime | None) -> datetime | None:
    """Normalize aware datetimes to UTC; naive ones are taken as UTC."""
    if v is None:
        return v
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class FixtureCreateRequest(CamelModel):
    """Create a fixture. Teams are referenced by name."""

    home_team: FixtureText
    away_team: FixtureText
    date: datetime
    location: FixtureText
    status: FixtureStatus = FixtureStatus.PENDING

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_utc(v)  # type: ignore[return-value]


class FixtureUpdateRequest(CamelModel):
    """Partial fixture update. Omitted fields are left unchanged."""

    home_team: FixtureText | None = None
    away_team: FixtureText | None = None
    date: datetime | None = None
    location: FixtureText | None = None
    status: FixtureStatus | None = None
    home_team_score: int | None = Field(None, ge=0)
    away_team_score: int | None = Field(None, ge=0)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime | None) -> datetime | None:
        return to_utc(v)


class FixtureResponse(CamelModel):
    """A fixture with team references as IDs."""

    id: str
    home_team_id: str
    away_team_id: str
    date: datetime
    location: str
    status: FixtureStatus
    home_team_score: int | None = None
    away_team_score: int | None = None
    unique_link: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FixtureDetailResponse(FixtureResponse):
    """A fixture with both teams embedded."""

    home_team: TeamResponse
    away_team: TeamResponse


class FixturePage(CamelModel):
    """One page of fixture search results."""

    items: list[FixtureDetailResponse]
    pagination: PaginationResponse
