"""Database module for the User API Service.

SQLAlchemy async persistence for the single ``users`` table.
"""

from services.user_api.database.models import Base, UserRecord
from services.user_api.database.session import DatabaseManager
from services.user_api.database.user_repository import SORTABLE_COLUMNS, UserRepository

__all__ = [
    # Models
    "Base",
    "UserRecord",
    # Session management
    "DatabaseManager",
    # Store access
    "SORTABLE_COLUMNS",
    "UserRepository",
]
