"""Common models shared across the service."""

import math
from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serialised with camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthCheck(CamelModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Timestamp"
    )


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Human-readable error message")


class MessageResponse(CamelModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Outcome message")


class Page(BaseModel, Generic[T]):
    """One zero-based page of results plus pagination metadata."""

    items: list[T] = Field(..., description="Items on this page")
    page: int = Field(..., ge=0, description="Zero-based page number")
    size: int = Field(..., ge=1, description="Requested page size")
    total_items: int = Field(..., ge=0, description="Total number of matching items")

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.size)

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page > 0


class PageRequest(BaseModel):
    """Pagination and sort parameters."""

    page: int = Field(default=0, ge=0, description="Zero-based page number")
    size: int = Field(default=10, ge=1, description="Page size")
    sort_field: str = Field(default="id", description="Field to sort by")
    descending: bool = Field(default=False, description="Sort direction")

    @classmethod
    def from_sort(
        cls, page: int, size: int, sort: Optional[str] = None
    ) -> "PageRequest":
        """
        Build a request from a ``field,direction`` sort expression.

        Direction is descending only when it equals "desc" case-insensitively.
        """
        field, _, direction = (sort or "id,asc").partition(",")
        return cls(
            page=page,
            size=size,
            sort_field=field.strip() or "id",
            descending=direction.strip().lower() == "desc",
        )
