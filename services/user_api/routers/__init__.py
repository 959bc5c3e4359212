"""Routers for the User API Service."""

from .auth import router as auth_router
from .metrics import router as metrics_router
from .users import router as users_router

__all__ = ["auth_router", "metrics_router", "users_router"]
