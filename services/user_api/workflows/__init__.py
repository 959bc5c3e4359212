"""Workflows orchestrating token, store and metrics calls per API operation."""

from services.user_api.workflows.auth_service import AuthService
from services.user_api.workflows.user_service import UserService

__all__ = ["AuthService", "UserService"]
