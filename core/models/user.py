"""User models."""

from typing import Optional

from pydantic import ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from core.models.common import CamelModel


class UserBase(CamelModel):
    """Mutable user fields."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Unique username",
        examples=["john_doe"],
    )
    email: EmailStr = Field(
        ..., description="Unique email address", examples=["john.doe@example.com"]
    )
    full_name: Optional[str] = Field(None, description="Full name", examples=["John Doe"])
    phone_number: Optional[str] = Field(
        None, description="Phone number", examples=["+1-555-123-4567"]
    )
    active: bool = Field(True, description="Whether the account is active")


class UserCreate(UserBase):
    """Model for creating a new user. A client-sent ``id`` is ignored."""


class UserUpdate(UserBase):
    """Model for replacing every mutable field of an existing user."""


class User(UserBase):
    """A stored user."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int = Field(..., description="Server-assigned identifier", examples=[1])
