"""Offset pagination, sorting and filter helpers shared by team and fixture search.

Out-of-range ``page``/``limit`` values are coerced to their defaults rather
than rejected. The total is counted with a separate query over the same filter,
so ``total_pages`` does not depend on the size of the returned page.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Literal, TypeVar

from sqlalchemy import ColumnElement, asc, desc, func, select

from mpl.errors import BadRequestError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.base import ExecutableOption

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class PageRequest:
    """A normalized page/sort request."""

    page: int
    limit: int
    sort_by: str
    order: SortOrder

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def build(
        cls,
        page: int | None,
        limit: int | None,
        sort_by: str | None,
        order: str | None,
        *,
        default_sort: str,
    ) -> PageRequest:
        """Apply defaults: page 1, limit 10, ``default_sort``, ascending."""
        if page is None or page < 1:
            page = DEFAULT_PAGE
        if limit is None or limit < 1:
            limit = DEFAULT_LIMIT
        return cls(
            page=page,
            limit=limit,
            sort_by=sort_by or default_sort,
            order="desc" if order == "desc" else "asc",
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus pagination metadata."""

    items: list[T]
    total: int
    total_pages: int
    current_page: int
    page_size: int


def count_pages(total: int, limit: int) -> int:
    """ceil(total / limit) without floating point."""
    return -(-total // limit)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column: Any, term: str) -> ColumnElement[bool]:  # noqa: ANN401
    """Case-insensitive substring match."""
    return column.ilike(f"%{escape_like(term)}%", escape="\\")


async def paginate(
    db: AsyncSession,
    model: type[T],
    conditions: Sequence[ColumnElement[bool]],
    page_request: PageRequest,
    sort_columns: Mapping[str, InstrumentedAttribute[Any]],
    *,
    options: Sequence[ExecutableOption] = (),
) -> Page[T]:
    """Fetch one sorted page of ``model`` rows matching ``conditions``.

    Args:
        db: Database session.
        model: ORM class to select.
        conditions: Filter clauses, combined with AND.
        page_request: Normalized page/sort request.
        sort_columns: Allowed sort keys mapped to columns.
        options: Loader options (e.g. eager-loaded relationships).

    Raises:
        BadRequestError: If ``page_request.sort_by`` is not an allowed key.
    """
    column = sort_columns.get(page_request.sort_by)
    if column is None:
        msg = f"Cannot sort by '{page_request.sort_by}'. Allowed: {', '.join(sorted(sort_columns))}"
        raise BadRequestError(msg, reason="invalid_sort")

    direction = desc if page_request.order == "desc" else asc
    tiebreak = model.id  # type: ignore[attr-defined]

    count_query = select(func.count()).select_from(model).where(*conditions)
    total = int((await db.execute(count_query)).scalar_one())

    query = (
        select(model)
        .where(*conditions)
        .order_by(direction(column), direction(tiebreak))
        .offset(page_request.offset)
        .limit(page_request.limit)
    )
    if options:
        query = query.options(*options)

    result = await db.execute(query)
    items = list(result.scalars().all())

    return Page(
        items=items,
        total=total,
        total_pages=count_pages(total, page_request.limit),
        current_page=page_request.page,
        page_size=page_request.limit,
    )
