"""Response envelope shared by every endpoint."""

from __future__ import annotations

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """``{"status": "success", "message": ..., "data": ...}``."""

    status: Literal["success"] = "success"
    message: str
    data: T | None = None


class ErrorResponse(BaseModel):
    """``{"status": "error", "error": ...}``."""

    status: Literal["error"] = "error"
    error: str
