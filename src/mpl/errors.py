"""Typed application errors.

Services raise these; the error handler middleware renders them as the
``{"status": "error", "error": message}`` envelope with the matching status.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 500
    default_reason = "internal"

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason or self.default_reason


class BadRequestError(AppError):
    status_code = 400
    default_reason = "bad_request"


class UnauthorizedError(AppError):
    status_code = 401
    default_reason = "unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_reason = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_reason = "not_found"


class InternalServerError(AppError):
    status_code = 500
    default_reason = "internal"
