"""Core models module."""

from core.models.common import (
    CamelModel,
    ErrorResponse,
    HealthCheck,
    MessageResponse,
    Page,
    PageRequest,
)
from core.models.user import User, UserBase, UserCreate, UserUpdate

__all__ = [
    # Common models
    "CamelModel",
    "HealthCheck",
    "ErrorResponse",
    "MessageResponse",
    "Page",
    "PageRequest",
    # User models
    "UserBase",
    "UserCreate",
    "UserUpdate",
    "User",
]
