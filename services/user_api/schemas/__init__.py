"""Pydantic schemas for the User API Service."""

from services.user_api.schemas.auth import (
    LoginResponse,
    LogoutResponse,
    SessionView,
    ValidateTokenResponse,
)
from services.user_api.schemas.users import (
    UserCountResponse,
    UserDeletedResponse,
    UserPageResponse,
)

__all__ = [
    # Auth
    "LoginResponse",
    "LogoutResponse",
    "SessionView",
    "ValidateTokenResponse",
    # Users
    "UserCountResponse",
    "UserDeletedResponse",
    "UserPageResponse",
]
