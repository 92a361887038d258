"""Unit tests for typed errors and log redaction."""

import pytest

from mpl.errors import (
    AppError,
    BadRequestError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    UnauthorizedError,
)
from mpl.middleware.logging import redact_secrets


class TestAppErrors:
    @pytest.mark.parametrize(
        ("cls", "status"),
        [
            (BadRequestError, 400),
            (UnauthorizedError, 401),
            (ForbiddenError, 403),
            (NotFoundError, 404),
            (InternalServerError, 500),
        ],
    )
    def test_status_codes(self, cls, status):
        error = cls("boom")
        assert isinstance(error, AppError)
        assert error.status_code == status
        assert error.message == "boom"

    def test_reason_defaults_per_class(self):
        assert NotFoundError("x").reason == "not_found"
        assert UnauthorizedError("x", reason="missing_token").reason == "missing_token"


class TestRedaction:
    def test_secrets_masked(self):
        event = {"event": "login", "password": "hunter22", "token": "abc", "user_id": 3}
        redacted = redact_secrets(None, "info", event)
        assert redacted["password"] == "***"
        assert redacted["token"] == "***"
        assert redacted["user_id"] == 3

    def test_other_fields_untouched(self):
        event = {"event": "team_created", "name": "Alpha"}
        assert redact_secrets(None, "info", dict(event)) == event
