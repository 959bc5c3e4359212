"""Tests for request/response models."""

import pytest
from pydantic import ValidationError

from core.models.common import Page, PageRequest
from core.models.user import User, UserCreate
from services.user_api.schemas import UserPageResponse

from tests.fixtures import TEST_EMAIL, TEST_USERNAME, user_payload


class TestUserModels:
    """Test cases for user validation and serialisation."""

    def test_accepts_camel_case_payload(self):
        user = UserCreate.model_validate(user_payload())

        assert user.username == TEST_USERNAME
        assert user.full_name == "John Doe"
        assert user.phone_number == "+1-555-123-4567"
        assert user.active is True

    def test_accepts_snake_case_fields(self):
        user = UserCreate(username=TEST_USERNAME, email=TEST_EMAIL, full_name="John")

        assert user.full_name == "John"

    def test_defaults(self):
        user = UserCreate(username=TEST_USERNAME, email=TEST_EMAIL)

        assert user.full_name is None
        assert user.phone_number is None
        assert user.active is True

    @pytest.mark.parametrize("username", ["ab", "x" * 51, ""])
    def test_username_length(self, username):
        with pytest.raises(ValidationError):
            UserCreate(username=username, email=TEST_EMAIL)

    @pytest.mark.parametrize("username", ["abc", "x" * 50])
    def test_username_length_bounds(self, username):
        assert UserCreate(username=username, email=TEST_EMAIL).username == username

    @pytest.mark.parametrize("email", ["not-an-email", "missing-at.example.com", "a@"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            UserCreate(username=TEST_USERNAME, email=email)

    def test_missing_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            UserCreate.model_validate({})

        fields = {error["loc"][0] for error in exc_info.value.errors()}
        assert fields == {"username", "email"}

    def test_client_id_is_ignored_on_create(self):
        user = UserCreate.model_validate(user_payload(id=99))

        assert not hasattr(user, "id")

    def test_user_serialises_camel_case(self):
        user = User(id=1, username=TEST_USERNAME, email=TEST_EMAIL, full_name="John")

        body = user.model_dump(by_alias=True)

        assert body == {
            "id": 1,
            "username": TEST_USERNAME,
            "email": TEST_EMAIL,
            "fullName": "John",
            "phoneNumber": None,
            "active": True,
        }


class TestPageRequest:
    """Test cases for sort expression parsing."""

    @pytest.mark.parametrize(
        "sort,field,descending",
        [
            ("id,asc", "id", False),
            ("username,desc", "username", True),
            ("email,DESC", "email", True),
            ("fullName,Desc", "fullName", True),
            ("username", "username", False),
            ("username,sideways", "username", False),
            (None, "id", False),
            (",desc", "id", True),
        ],
    )
    def test_from_sort(self, sort, field, descending):
        request = PageRequest.from_sort(0, 10, sort)

        assert request.sort_field == field
        assert request.descending is descending

    def test_rejects_negative_page(self):
        with pytest.raises(ValidationError):
            PageRequest(page=-1)

    def test_rejects_zero_size(self):
        with pytest.raises(ValidationError):
            PageRequest(size=0)


class TestPage:
    """Test cases for derived page metadata."""

    @pytest.mark.parametrize(
        "page,size,total,pages,has_next,has_previous",
        [
            (0, 10, 0, 0, False, False),
            (0, 10, 10, 1, False, False),
            (0, 10, 11, 2, True, False),
            (1, 10, 11, 2, False, True),
            (3, 10, 11, 2, False, True),
        ],
    )
    def test_metadata(self, page, size, total, pages, has_next, has_previous):
        result = Page[int](items=[], page=page, size=size, total_items=total)

        assert result.total_pages == pages
        assert result.has_next is has_next
        assert result.has_previous is has_previous

    def test_page_response_shape(self):
        user = User(id=1, username=TEST_USERNAME, email=TEST_EMAIL)
        page = Page[User](items=[user], page=0, size=10, total_items=1)

        body = UserPageResponse.from_page(page, search_query="john").model_dump(by_alias=True)

        assert body["currentPage"] == 0
        assert body["pageSize"] == 10
        assert body["totalItems"] == 1
        assert body["totalPages"] == 1
        assert body["hasNext"] is False
        assert body["hasPrevious"] is False
        assert body["searchQuery"] == "john"
        assert body["users"][0]["username"] == TEST_USERNAME
