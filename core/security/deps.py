"""FastAPI dependencies for authentication."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import UnauthorizedError

# Declares the bearer scheme in OpenAPI; the Request Gate does the enforcing
bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by /auth/login")


async def get_current_subject(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Get the subject the Request Gate verified for this request.

    Args:
        request: Incoming request
        credentials: Bearer credentials (used for OpenAPI documentation)

    Returns:
        The token subject (username)

    Raises:
        UnauthorizedError: If the gate attached no verified subject
    """
    subject = getattr(request.state, "subject", None)
    if subject is None:
        raise UnauthorizedError("Authentication required")
    return subject
