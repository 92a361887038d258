"""Fixture router: all /api/fixtures/* endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mpl.auth.dependencies import Identity, get_current_identity, require_admin
from mpl.database import get_session
from mpl.errors import NotFoundError
from mpl.fixtures.schemas import (
    FixtureCreateRequest,
    FixtureDetailResponse,
    FixturePage,
    FixtureSortField,
    FixtureStatus,
    FixtureUpdateRequest,
    to_utc,
)
from mpl.fixtures.service import (
    DEFAULT_SORT,
    create_fixture,
    get_fixture,
    remove_fixture,
    search_fixtures,
    update_fixture,
)
from mpl.responses import SuccessResponse
from mpl.schemas import PaginationResponse
from mpl.search import PageRequest, SortOrder

router = APIRouter(prefix="/api/fixtures", tags=["Fixtures"])


@router.post("", status_code=201, response_model=SuccessResponse[FixtureDetailResponse])
async def create_fixture_endpoint(
    body: FixtureCreateRequest,
    _admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[FixtureDetailResponse]:
    """Create a fixture between two existing teams (admin only)."""
    fixture = await create_fixture(
        db,
        home_team=body.home_team,
        away_team=body.away_team,
        date=body.date,
        location=body.location,
        status=body.status.value,
    )
    await db.commit()
    return SuccessResponse[FixtureDetailResponse](
        message="Fixture created successfully",
        data=FixtureDetailResponse.model_validate(fixture),
    )


@router.patch("/{fixture_id}", response_model=SuccessResponse[FixtureDetailResponse])
async def update_fixture_endpoint(
    fixture_id: uuid.UUID,
    body: FixtureUpdateRequest,
    _admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[FixtureDetailResponse]:
    """Partially update a fixture (admin only)."""
    fixture = await update_fixture(
        db,
        str(fixture_id),
        home_team=body.home_team,
        away_team=body.away_team,
        date=body.date,
        location=body.location,
        status=body.status.value if body.status is not None else None,
        home_team_score=body.home_team_score,
        away_team_score=body.away_team_score,
    )
    await db.commit()
    return SuccessResponse[FixtureDetailResponse](
        message="Fixture updated successfully",
        data=FixtureDetailResponse.model_validate(fixture),
    )


@router.delete("/{fixture_id}", response_model=SuccessResponse[None])
async def remove_fixture_endpoint(
    fixture_id: uuid.UUID,
    _admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[None]:
    """Delete a fixture (admin only)."""
    await remove_fixture(db, str(fixture_id))
    await db.commit()
    return SuccessResponse[None](message="Fixture removed successfully")


@router.get("/search", response_model=SuccessResponse[FixturePage])
async def search_fixtures_endpoint(
    home_team_name: str | None = Query(None, alias="homeTeamName", max_length=128),
    away_team_name: str | None = Query(None, alias="awayTeamName", max_length=128),
    status: FixtureStatus | None = Query(None),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    sort_by: FixtureSortField | None = Query(None, alias="sortBy"),
    order: SortOrder | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[FixturePage]:
    """Search fixtures by team names, status and date range."""
    page_request = PageRequest.build(page, limit, sort_by, order, default_sort=DEFAULT_SORT)
    result = await search_fixtures(
        db,
        page_request,
        home_team_name=home_team_name,
        away_team_name=away_team_name,
        status=status.value if status is not None else None,
        start_date=to_utc(start_date),
        end_date=to_utc(end_date),
    )
    return SuccessResponse[FixturePage](
        message="Fixtures fetched successfully",
        data=FixturePage(
            items=[FixtureDetailResponse.model_validate(f) for f in result.items],
            pagination=PaginationResponse(
                total=result.total,
                total_pages=result.total_pages,
                current_page=result.current_page,
                page_size=result.page_size,
            ),
        ),
    )


@router.get("/{fixture_id}", response_model=SuccessResponse[FixtureDetailResponse])
async def view_fixture_endpoint(
    fixture_id: uuid.UUID,
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse[FixtureDetailResponse]:
    """Fetch a fixture with both teams embedded."""
    fixture = await get_fixture(db, str(fixture_id))
    if fixture is None:
        msg = "Fixture not found"
        raise NotFoundError(msg)
    return SuccessResponse[FixtureDetailResponse](
        message="Fixture fetched successfully",
        data=FixtureDetailResponse.model_validate(fixture),
    )
