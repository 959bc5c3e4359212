"""User router for the User API Service.

All routes require a bearer token; the Request Gate rejects requests
without one before they get here.

Endpoints:
- GET /users - Paginated, sorted list
- GET /users/search - Case-insensitive username/email search
- GET /users/count - Total and active user counts (cached)
- POST /users/cache/clear - Drop cached counts
- GET /users/{id} - Single user
- POST /users - Create
- PUT /users/{id} - Replace
- DELETE /users/{id} - Delete
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from core.config.settings import Settings
from core.exceptions import InvalidInputError, NotFoundError
from core.models.common import ErrorResponse, MessageResponse, PageRequest
from core.models.user import User, UserCreate, UserUpdate
from core.security import get_current_subject
from services.user_api.dependencies import get_app_settings, get_user_service
from services.user_api.schemas import (
    UserCountResponse,
    UserDeletedResponse,
    UserPageResponse,
)
from services.user_api.workflows import UserService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_current_subject)],
    responses={401: {"model": ErrorResponse}},
)


def _page_size(size: Optional[int], settings: Settings) -> int:
    if size is None:
        return settings.default_page_size
    if size > settings.max_page_size:
        raise InvalidInputError(f"Page size must not exceed {settings.max_page_size}")
    return size


@router.get("", response_model=UserPageResponse)
async def list_users(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: Optional[int] = Query(None, ge=1, description="Page size"),
    sort: str = Query("id,asc", description="Sort as field,direction"),
    settings: Settings = Depends(get_app_settings),
    user_service: UserService = Depends(get_user_service),
) -> UserPageResponse:
    """Get one page of users."""
    request = PageRequest.from_sort(page, _page_size(size, settings), sort)
    result = await user_service.list_users(request)
    return UserPageResponse.from_page(result)


@router.get("/search", response_model=UserPageResponse)
async def search_users(
    query: str = Query(..., description="Substring of username or email"),
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: Optional[int] = Query(None, ge=1, description="Page size"),
    settings: Settings = Depends(get_app_settings),
    user_service: UserService = Depends(get_user_service),
) -> UserPageResponse:
    """Search users by username or email, ignoring case."""
    result = await user_service.search_users(query, page, _page_size(size, settings))
    return UserPageResponse.from_page(result, search_query=query)


@router.get("/count", response_model=UserCountResponse)
async def count_users(
    user_service: UserService = Depends(get_user_service),
) -> UserCountResponse:
    """Get user counts. Values may be up to one cache TTL old."""
    return UserCountResponse(
        total_users=await user_service.get_user_count(),
        active_users=await user_service.get_active_user_count(),
        cached=True,
    )


@router.post("/cache/clear", response_model=MessageResponse)
async def clear_cache(
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Drop cached user counts."""
    user_service.clear_caches()
    return MessageResponse(message="User caches cleared successfully")


@router.get(
    "/{user_id}",
    response_model=User,
    responses={404: {"model": ErrorResponse}},
)
async def get_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Get a user by ID."""
    user = await user_service.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User not found with ID: {user_id}")
    return user


@router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_user(
    data: UserCreate,
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Create a user. Username and email must both be unused."""
    return await user_service.create_user(data)


@router.put(
    "/{user_id}",
    response_model=User,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_user(
    user_id: int,
    data: UserUpdate,
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Replace every mutable field of a user."""
    return await user_service.update_user(user_id, data)


@router.delete(
    "/{user_id}",
    response_model=UserDeletedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
) -> UserDeletedResponse:
    """Delete a user."""
    await user_service.delete_user(user_id)
    return UserDeletedResponse(message="User deleted successfully", id=user_id)
