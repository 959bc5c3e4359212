"""Auth-related Pydantic schemas.

Schemas for login, token validation and session views.
"""

from typing import Optional

from pydantic import Field

from core.models.common import CamelModel


class LoginResponse(CamelModel):
    """Login response schema."""

    token: str = Field(..., description="JWT access token")
    username: str = Field(..., description="Token subject")
    message: str = Field(default="Authentication successful", description="Outcome message")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: str = Field(default="1 hour", description="Token lifetime")


class ValidateTokenResponse(CamelModel):
    """Token validation response schema."""

    valid: bool = Field(..., description="Whether the token is valid")
    message: str = Field(..., description="Outcome message")
    username: Optional[str] = Field(None, description="Token subject if valid")


class LogoutResponse(CamelModel):
    """Logout acknowledgement."""

    message: str = Field(default="User logged out successfully", description="Outcome message")
    username: Optional[str] = Field(None, description="Logged out user")


class SessionView(CamelModel):
    """Ephemeral session information, recomputed on every call."""

    username: Optional[str] = Field(None, description="Session subject")
    last_access: int = Field(..., description="Epoch milliseconds of this read")
    active: bool = Field(default=True, description="Whether the session is active")
    refreshed: Optional[bool] = Field(None, description="Set on refresh responses")
