"""Request/response schemas for team endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import StringConstraints

from mpl.schemas import CamelModel, PaginationResponse

TeamSortField = Literal["name", "country"]

TeamText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]


class TeamCreateRequest(CamelModel):
    """Create a team."""

    name: TeamText
    country: TeamText


class TeamUpdateRequest(CamelModel):
    """Partial team update. Omitted fields are left unchanged."""

    name: TeamText | None = None
    country: TeamText | None = None


class TeamResponse(CamelModel):
    """A team as returned by the API."""

    id: str
    name: str
    country: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TeamPage(CamelModel):
    """One page of team search results."""

    items: list[TeamResponse]
    pagination: PaginationResponse
