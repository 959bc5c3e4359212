"""Common test data for unit and integration tests."""

from typing import Any

TEST_USERNAME = "john_doe"
TEST_EMAIL = "john@x.com"
TEST_FULL_NAME = "John Doe"
TEST_PHONE_NUMBER = "+1-555-123-4567"

OTHER_USERNAME = "alice"
OTHER_EMAIL = "alice@example.com"


def user_payload(
    username: str = TEST_USERNAME,
    email: str = TEST_EMAIL,
    **overrides: Any,
) -> dict[str, Any]:
    """JSON body for creating or replacing a user."""
    payload = {
        "username": username,
        "email": email,
        "fullName": TEST_FULL_NAME,
        "phoneNumber": TEST_PHONE_NUMBER,
        "active": True,
    }
    payload.update(overrides)
    return payload
