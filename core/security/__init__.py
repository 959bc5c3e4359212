"""Core security module."""

from core.security.deps import bearer_scheme, get_current_subject
from core.security.jwt import TokenData, TokenService

__all__ = [
    # JWT
    "TokenService",
    "TokenData",
    # Dependencies
    "bearer_scheme",
    "get_current_subject",
]
