"""Schema building blocks shared by the team and fixture endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase keys; accepts camelCase or snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationResponse(CamelModel):
    """Pagination metadata for a search result page."""

    total: int
    total_pages: int
    current_page: int
    page_size: int


class IdResponse(CamelModel):
    """Identifier of a newly created resource."""

    id: str
