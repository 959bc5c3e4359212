"""User workflow: CRUD, search and counts over the user store.

Every store call is timed into the database query histogram. Counts are
served from a short-lived cache; writes that change the row count drop it.
"""

import logging
from typing import Optional

from core.exceptions import ConflictError, NotFoundError
from core.models.common import Page, PageRequest
from core.models.user import User, UserCreate, UserUpdate
from services.user_api.cache import CountCache
from services.user_api.database.user_repository import UserRepository
from services.user_api.metrics import MetricsSink

logger = logging.getLogger(__name__)

COUNT_KEY = "count"
ACTIVE_COUNT_KEY = "active_count"


class UserService:
    """Orchestrates user store access, metrics and the count cache."""

    def __init__(
        self,
        repository: UserRepository,
        metrics: MetricsSink,
        count_cache: CountCache,
    ):
        self._repository = repository
        self._metrics = metrics
        self._count_cache = count_cache

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        logger.debug(f"Fetching user with ID: {user_id}")
        with self._metrics.time_database_query():
            return await self._repository.get_by_id(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        logger.debug(f"Fetching user with username: {username}")
        with self._metrics.time_database_query():
            return await self._repository.get_by_username(username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        logger.debug(f"Fetching user with email: {email}")
        with self._metrics.time_database_query():
            return await self._repository.get_by_email(email)

    async def list_users(self, request: PageRequest) -> Page[User]:
        """
        Get one page of users.

        Args:
            request: Page number, size and sort order

        Returns:
            The requested page with pagination metadata
        """
        logger.debug(f"Fetching users with pagination: {request}")
        with self._metrics.time_database_query():
            page = await self._repository.find_page(request)
        self._metrics.record_business_metric("users_listed", page.total_items)
        return page

    async def search_users(self, query: str, page: int, size: int) -> Page[User]:
        """
        Get users whose username or email contains the query, ignoring case.
        """
        logger.debug(f"Searching users with query: {query}")
        with self._metrics.time_database_query():
            result = await self._repository.search_page(query, page, size)
        self._metrics.record_business_metric("users_searched", result.total_items, query=query)
        return result

    async def create_user(self, data: UserCreate) -> User:
        """
        Create a user after checking username, then email, for uniqueness.

        Two concurrent creates can both pass these checks; the store's
        unique constraint then rejects the loser with a ConflictError.

        Raises:
            ConflictError: If the username or email is already taken
        """
        logger.debug(f"Creating new user: {data.username}")
        with self._metrics.time_database_query():
            if await self._repository.exists_by_username(data.username):
                raise ConflictError(f"Username already exists: {data.username}")
            if await self._repository.exists_by_email(data.email):
                raise ConflictError(f"Email already exists: {data.email}")

            user = await self._repository.add(data)
            total = await self._repository.count()

        logger.info(f"Created user: {user.username} with ID: {user.id}")
        self._metrics.record_user_created()
        self._metrics.record_business_metric("user_created", 1.0, username=user.username)
        self._metrics.set_total_users(total)
        self._invalidate_counts()
        return user

    async def update_user(self, user_id: int, data: UserUpdate) -> User:
        """
        Overwrite username, email, full name, phone number and active flag.

        Unlike create, the new username and email are not pre-checked
        against other users; only the store's unique constraint applies.

        Raises:
            NotFoundError: If no user has that ID
        """
        logger.debug(f"Updating user with ID: {user_id}")
        with self._metrics.time_database_query():
            user = await self._repository.update(user_id, data)
        if user is None:
            raise NotFoundError(f"User not found with ID: {user_id}")

        logger.info(f"Updated user: {user.username} with ID: {user.id}")
        self._metrics.record_user_updated()
        self._metrics.record_business_metric("user_updated", 1.0, username=user.username)
        return user

    async def delete_user(self, user_id: int) -> None:
        """
        Hard-delete a user.

        Raises:
            NotFoundError: If no user has that ID
        """
        logger.debug(f"Deleting user with ID: {user_id}")
        with self._metrics.time_database_query():
            deleted = await self._repository.delete(user_id)
            if deleted is None:
                raise NotFoundError(f"User not found with ID: {user_id}")
            total = await self._repository.count()

        logger.info(f"Deleted user: {deleted.username} with ID: {user_id}")
        self._metrics.record_user_deleted()
        self._metrics.record_business_metric("user_deleted", 1.0, username=deleted.username)
        self._metrics.set_total_users(total)
        self._invalidate_counts()

    async def get_user_count(self) -> int:
        """Total number of users, cached."""
        return await self._count_cache.get_or_compute(COUNT_KEY, self._count_users)

    async def get_active_user_count(self) -> int:
        """
        Number of active users, cached.

        Currently the same value as get_user_count: the active flag is not
        filtered on yet.
        """
        return await self._count_cache.get_or_compute(
            ACTIVE_COUNT_KEY, self._count_active_users
        )

    async def _count_users(self) -> int:
        logger.debug("Fetching total user count")
        with self._metrics.time_database_query():
            count = await self._repository.count()
        self._metrics.record_business_metric("user_count_retrieved", count)
        self._metrics.set_total_users(count)
        return count

    async def _count_active_users(self) -> int:
        logger.debug("Fetching active user count")
        # TODO: filter on UserRecord.active once the expected semantics are confirmed
        with self._metrics.time_database_query():
            count = await self._repository.count()
        self._metrics.record_business_metric("active_user_count_retrieved", count)
        self._metrics.set_active_users(count)
        return count

    def _invalidate_counts(self) -> None:
        self._count_cache.invalidate(COUNT_KEY)
        self._count_cache.invalidate(ACTIVE_COUNT_KEY)

    def clear_caches(self) -> None:
        """Drop cached counts."""
        logger.info("Clearing all caches")
        self._count_cache.clear()
        self._metrics.record_business_metric("cache_cleared", 1.0, cache_type="all")
