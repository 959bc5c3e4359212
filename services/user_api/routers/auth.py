"""Authentication router for the User API Service.

Every route here is open: none of them requires a bearer token.

Endpoints:
- POST /auth/login - Issue a token for a username
- POST /auth/validate - Check the bearer token in the Authorization header
- POST /auth/logout - Record a logout
- GET /auth/session/{username} - Current session view
- POST /auth/session/refresh/{username} - Refreshed session view
- GET /auth/health - Auth health
- POST /auth/cache/clear - Clear authentication caches
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import JSONResponse

from core.models.common import ErrorResponse, MessageResponse
from services.user_api.dependencies import get_auth_service
from services.user_api.middleware.request_gate import BEARER_PREFIX
from services.user_api.schemas import (
    LoginResponse,
    LogoutResponse,
    SessionView,
    ValidateTokenResponse,
)
from services.user_api.workflows import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _validation_failure(status_code: int, message: str) -> JSONResponse:
    body = ValidateTokenResponse(valid=False, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}},
)
async def login(
    username: Optional[str] = Query(None, description="Username to issue a token for"),
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Issue a JWT for a username.

    No credentials are checked; any non-blank username is accepted.
    """
    return auth_service.login(username)


@router.post(
    "/validate",
    response_model=ValidateTokenResponse,
    responses={400: {"model": ValidateTokenResponse}, 401: {"model": ValidateTokenResponse}},
)
async def validate_token(
    authorization: Optional[str] = Header(None, description="Bearer <token>"),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Validate the bearer token sent in the Authorization header.

    Returns 400 when the header is missing or not a Bearer header, and 401
    when the token is malformed, tampered with or expired.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return _validation_failure(status.HTTP_400_BAD_REQUEST, "Invalid authorization header")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not auth_service.validate_token(token):
        return _validation_failure(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token")

    return ValidateTokenResponse(
        valid=True,
        message="Token is valid",
        username=auth_service.token_subject(token),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    username: Optional[str] = Query(None, description="User logging out"),
    auth_service: AuthService = Depends(get_auth_service),
) -> LogoutResponse:
    """Record a logout. Tokens already issued remain valid until they expire."""
    auth_service.logout_user(username)
    return LogoutResponse(message="User logged out successfully", username=username)


@router.get(
    "/session/{username}",
    response_model=SessionView,
    response_model_exclude_none=True,
)
async def get_session(
    username: str,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionView:
    """Get a freshly computed session view."""
    return auth_service.get_user_session(username)


@router.post(
    "/session/refresh/{username}",
    response_model=SessionView,
    response_model_exclude_none=True,
)
async def refresh_session(
    username: str,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionView:
    """Get a freshly computed session view flagged as refreshed."""
    return auth_service.refresh_user_session(username)


@router.get("/health")
async def health() -> dict:
    """Auth service health."""
    return {
        "status": "UP",
        "service": "auth-service",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/cache/clear", response_model=MessageResponse)
async def clear_cache(
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Clear authentication caches."""
    auth_service.clear_all_auth_caches()
    return MessageResponse(message="Authentication caches cleared successfully")
