"""User endpoint schemas: page envelopes and count responses."""

from typing import Optional

from pydantic import Field

from core.models.common import CamelModel, Page
from core.models.user import User


class UserPageResponse(CamelModel):
    """A page of users with pagination metadata."""

    users: list[User] = Field(..., description="Users on this page")
    current_page: int = Field(..., description="Zero-based page number")
    page_size: int = Field(..., description="Requested page size")
    total_items: int = Field(..., description="Total number of matching users")
    total_pages: int = Field(..., description="Total number of pages")
    has_next: bool = Field(..., description="Whether a later page exists")
    has_previous: bool = Field(..., description="Whether an earlier page exists")
    search_query: Optional[str] = Field(None, description="Query of a search request")

    @classmethod
    def from_page(cls, page: Page[User], search_query: Optional[str] = None) -> "UserPageResponse":
        return cls(
            users=page.items,
            current_page=page.page,
            page_size=page.size,
            total_items=page.total_items,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_previous=page.has_previous,
            search_query=search_query,
        )


class UserCountResponse(CamelModel):
    """User counts, possibly served from cache."""

    total_users: int = Field(..., description="Number of users")
    active_users: int = Field(..., description="Number of active users")
    cached: bool = Field(default=True, description="Counts may be up to one TTL stale")


class UserDeletedResponse(CamelModel):
    """Delete acknowledgement."""

    message: str = Field(default="User deleted successfully", description="Outcome message")
    id: int = Field(..., description="ID of the deleted user")
