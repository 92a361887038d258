"""Team router: all /api/teams/* endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mpl.auth.dependencies import Identity, get_current_identity, require_admin
from mpl.database import get_session
from mpl.errors import NotFoundError
from mpl.responses import SuccessResponse
from mpl.schemas import IdResponse, PaginationResponse
from mpl.search import PageRequest, SortOrder
from mpl.teams.schemas import (
    TeamCreateRequest,
    TeamPage,
    TeamResponse,
    TeamSortField,
    TeamUpdateRequest,
)
from mpl.teams.service import (
    DEFAULT_SORT,
    add_team,
    get_team,
    remove_team,
    search_teams,
    update_team,
)

router = APIRouter(prefix="/api/teams", tags=["Teams"])


@router.post("", status_code=201, response_model=SuccessResponse[IdResponse])
async def create_team_endpoint(
    body: TeamCreateRequest,
    _admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[IdResponse]:
    """Create a team (admin only)."""
    team = await add_team(db, body.name, body.country)
    await db.commit()
    return SuccessResponse[IdResponse](message="Team added successfully", data=IdResponse(id=team.id))


@router.patch("/{team_id}", response_model=SuccessResponse[TeamResponse])
async def update_team_endpoint(
    team_id: uuid.UUID,
    body: TeamUpdateRequest,
    _admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[TeamResponse]:
    """Partially update a team (admin only)."""
    team = await update_team(db, str(team_id), name=body.name, country=body.country)
    await db.commit()
    return SuccessResponse[TeamResponse](
        message="Team updated successfully",
        data=TeamResponse.model_validate(team),
    )


@router.delete("/{team_id}", response_model=SuccessResponse[None])
async def remove_team_endpoint(
    team_id: uuid.UUID,
    _admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[None]:
    """Delete a team (admin only)."""
    await remove_team(db, str(team_id))
    await db.commit()
    return SuccessResponse[None](message="Team removed successfully")


@router.get("/search", response_model=SuccessResponse[TeamPage])
async def search_teams_endpoint(
    name: str | None = Query(None, max_length=128),
    country: str | None = Query(None, max_length=128),
    sort_by: TeamSortField | None = Query(None, alias="sortBy"),
    order: SortOrder | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[TeamPage]:
    """Search teams with pagination and sorting."""
    page_request = PageRequest.build(page, limit, sort_by, order, default_sort=DEFAULT_SORT)
    result = await search_teams(db, page_request, name=name, country=country)
    return SuccessResponse[TeamPage](
        message="Teams fetched successfully",
        data=TeamPage(
            items=[TeamResponse.model_validate(t) for t in result.items],
            pagination=PaginationResponse(
                total=result.total,
                total_pages=result.total_pages,
                current_page=result.current_page,
                page_size=result.page_size,
            ),
        ),
    )


@router.get("/{team_id}", response_model=SuccessResponse[TeamResponse])
async def view_team_endpoint(
    team_id: uuid.UUID,
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[TeamResponse]:
    """Fetch a single team."""
    team = await get_team(db, str(team_id))
    if team is None:
        msg = "Team not found"
        raise NotFoundError(msg)
    return SuccessResponse[TeamResponse](
        message="Team fetched successfully",
        data=TeamResponse.model_validate(team),
    )
