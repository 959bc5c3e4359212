"""User store access using SQLAlchemy async.

CRUD, existence checks, paging and search over the ``users`` table. Each
call runs in its own session from the shared DatabaseManager unless a
session is passed in.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, InvalidInputError
from core.models.common import Page, PageRequest
from core.models.user import User, UserBase, UserCreate, UserUpdate
from services.user_api.database.models import UserRecord
from services.user_api.database.session import DatabaseManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

SORTABLE_COLUMNS = {
    "id": UserRecord.id,
    "username": UserRecord.username,
    "email": UserRecord.email,
    "fullName": UserRecord.full_name,
    "full_name": UserRecord.full_name,
    "phoneNumber": UserRecord.phone_number,
    "phone_number": UserRecord.phone_number,
    "active": UserRecord.active,
}


def _conflict_from(error: IntegrityError, data: UserBase) -> ConflictError:
    """Translate a unique-constraint violation into a ConflictError."""
    detail = str(error.orig).lower()
    if "username" in detail:
        return ConflictError(f"Username already exists: {data.username}")
    if "email" in detail:
        return ConflictError(f"Email already exists: {data.email}")
    return ConflictError("User violates a uniqueness constraint")


class UserRepository:
    """Async queries against the users table."""

    def __init__(self, db_manager: DatabaseManager):
        self._db = db_manager

    async def _run(
        self,
        query: Callable[[AsyncSession], Awaitable[T]],
        session: Optional[AsyncSession] = None,
    ) -> T:
        if session is not None:
            return await query(session)
        async with self._db.session() as s:
            return await query(s)

    async def get_by_id(
        self, user_id: int, session: Optional[AsyncSession] = None
    ) -> Optional[User]:
        """
        Get a user by ID.

        Args:
            user_id: The user identifier
            session: Optional session (uses new session if not provided)

        Returns:
            User if found, None otherwise
        """
        async def _query(s: AsyncSession) -> Optional[User]:
            row = await s.get(UserRecord, user_id)
            return User.model_validate(row) if row is not None else None

        return await self._run(_query, session)

    async def get_by_username(
        self, username: str, session: Optional[AsyncSession] = None
    ) -> Optional[User]:
        """Get a user by exact username."""
        async def _query(s: AsyncSession) -> Optional[User]:
            result = await s.execute(select(UserRecord).where(UserRecord.username == username))
            row = result.scalar_one_or_none()
            return User.model_validate(row) if row is not None else None

        return await self._run(_query, session)

    async def get_by_email(
        self, email: str, session: Optional[AsyncSession] = None
    ) -> Optional[User]:
        """Get a user by exact email."""
        async def _query(s: AsyncSession) -> Optional[User]:
            result = await s.execute(select(UserRecord).where(UserRecord.email == email))
            row = result.scalar_one_or_none()
            return User.model_validate(row) if row is not None else None

        return await self._run(_query, session)

    async def exists_by_username(
        self, username: str, session: Optional[AsyncSession] = None
    ) -> bool:
        async def _query(s: AsyncSession) -> bool:
            result = await s.execute(
                select(UserRecord.id).where(UserRecord.username == username).limit(1)
            )
            return result.first() is not None

        return await self._run(_query, session)

    async def exists_by_email(
        self, email: str, session: Optional[AsyncSession] = None
    ) -> bool:
        async def _query(s: AsyncSession) -> bool:
            result = await s.execute(
                select(UserRecord.id).where(UserRecord.email == email).limit(1)
            )
            return result.first() is not None

        return await self._run(_query, session)

    async def find_page(
        self, request: PageRequest, session: Optional[AsyncSession] = None
    ) -> Page[User]:
        """
        Get one page of users in the requested order.

        Args:
            request: Page number, size and sort order
            session: Optional session (uses new session if not provided)

        Returns:
            The requested page

        Raises:
            InvalidInputError: If the sort field is not a user column
        """
        column = SORTABLE_COLUMNS.get(request.sort_field)
        if column is None:
            raise InvalidInputError(f"Cannot sort users by: {request.sort_field}")
        order = column.desc() if request.descending else column.asc()

        async def _query(s: AsyncSession) -> Page[User]:
            total = await s.scalar(select(func.count()).select_from(UserRecord))
            result = await s.execute(
                select(UserRecord)
                .order_by(order, UserRecord.id.asc())
                .offset(request.page * request.size)
                .limit(request.size)
            )
            return Page[User](
                items=[User.model_validate(row) for row in result.scalars()],
                page=request.page,
                size=request.size,
                total_items=total or 0,
            )

        return await self._run(_query, session)

    async def search_page(
        self,
        query: str,
        page: int,
        size: int,
        session: Optional[AsyncSession] = None,
    ) -> Page[User]:
        """
        Get users whose username or email contains ``query``, ignoring case.

        Args:
            query: Substring to look for
            page: Zero-based page number
            size: Page size
            session: Optional session (uses new session if not provided)

        Returns:
            The requested page of matches, ordered by ID
        """
        condition = or_(
            UserRecord.username.icontains(query, autoescape=True),
            UserRecord.email.icontains(query, autoescape=True),
        )

        async def _query(s: AsyncSession) -> Page[User]:
            total = await s.scalar(
                select(func.count()).select_from(UserRecord).where(condition)
            )
            result = await s.execute(
                select(UserRecord)
                .where(condition)
                .order_by(UserRecord.id.asc())
                .offset(page * size)
                .limit(size)
            )
            return Page[User](
                items=[User.model_validate(row) for row in result.scalars()],
                page=page,
                size=size,
                total_items=total or 0,
            )

        return await self._run(_query, session)

    async def add(
        self, data: UserCreate, session: Optional[AsyncSession] = None
    ) -> User:
        """
        Insert a new user.

        Args:
            data: Fields of the new user
            session: Optional session (uses new session if not provided)

        Returns:
            The stored user with its assigned ID

        Raises:
            ConflictError: If the store's unique constraint rejects the row
        """
        async def _create(s: AsyncSession) -> User:
            record = UserRecord(
                username=data.username,
                email=data.email,
                full_name=data.full_name,
                phone_number=data.phone_number,
                active=data.active,
            )
            s.add(record)
            await s.flush()
            await s.refresh(record)
            return User.model_validate(record)

        try:
            return await self._run(_create, session)
        except IntegrityError as e:
            raise _conflict_from(e, data) from e

    async def update(
        self, user_id: int, data: UserUpdate, session: Optional[AsyncSession] = None
    ) -> Optional[User]:
        """
        Overwrite every mutable field of a user.

        Args:
            user_id: The user identifier
            data: Replacement field values
            session: Optional session (uses new session if not provided)

        Returns:
            The updated user, or None if no user has that ID

        Raises:
            ConflictError: If the store's unique constraint rejects the change
        """
        async def _update(s: AsyncSession) -> Optional[User]:
            record = await s.get(UserRecord, user_id)
            if record is None:
                return None
            record.username = data.username
            record.email = data.email
            record.full_name = data.full_name
            record.phone_number = data.phone_number
            record.active = data.active
            await s.flush()
            return User.model_validate(record)

        try:
            return await self._run(_update, session)
        except IntegrityError as e:
            raise _conflict_from(e, data) from e

    async def delete(
        self, user_id: int, session: Optional[AsyncSession] = None
    ) -> Optional[User]:
        """
        Hard-delete a user.

        Returns:
            The deleted user, or None if no user has that ID
        """
        async def _delete(s: AsyncSession) -> Optional[User]:
            record = await s.get(UserRecord, user_id)
            if record is None:
                return None
            deleted = User.model_validate(record)
            await s.delete(record)
            await s.flush()
            return deleted

        return await self._run(_delete, session)

    async def count(self, session: Optional[AsyncSession] = None) -> int:
        """Total number of users."""
        async def _query(s: AsyncSession) -> int:
            return (await s.scalar(select(func.count()).select_from(UserRecord))) or 0

        return await self._run(_query, session)
