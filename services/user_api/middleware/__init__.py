"""Middleware for the User API Service.

Re-exports all middleware functions so they can be imported from
`services.user_api.middleware` directly.
"""

from services.user_api.middleware.logging import log_requests
from services.user_api.middleware.request_gate import (
    bearer_token,
    request_gate_middleware,
    requires_token,
)

__all__ = [
    "bearer_token",
    "log_requests",
    "request_gate_middleware",
    "requires_token",
]
