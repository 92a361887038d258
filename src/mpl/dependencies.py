"""Shared FastAPI dependencies."""

from fastapi import Request

from mpl.config import Settings
from mpl.redis_client import get_redis as _get_redis

get_redis = _get_redis


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""
    settings: Settings = request.app.state.settings
    return settings
