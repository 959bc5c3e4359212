"""Typed application errors.

Each error carries the HTTP status the API surface answers with. Workflows
raise them; the application's exception handlers turn them into
``{"error": message}`` bodies.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInputError(AppError):
    """Caller supplied empty or malformed data."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AppError):
    """A uniqueness constraint would be violated."""

    status_code = status.HTTP_409_CONFLICT


class NotFoundError(AppError):
    """The requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(AppError):
    """Bearer token absent or rejected on a protected route."""

    status_code = status.HTTP_401_UNAUTHORIZED


class InternalError(AppError):
    """Unexpected failure."""


class TokenError(UnauthorizedError):
    """Base class for token verification failures."""


class MalformedTokenError(TokenError):
    """Token cannot be parsed, or its claims are unusable."""


class ExpiredTokenError(TokenError):
    """Token is past its encoded expiry."""


class InvalidSignatureError(TokenError):
    """Token signature does not match the configured secret."""
