"""Tests for the authentication workflow."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from core.exceptions import InvalidInputError
from core.security.jwt import TokenService
from services.user_api.schemas import LoginResponse, SessionView
from services.user_api.workflows import AuthService


class TestLogin:
    """Test cases for login."""

    @pytest.mark.parametrize("username", ["bob", "john_doe", " padded ", "x"])
    def test_login_then_validate(self, auth_service, username):
        response = auth_service.login(username)

        assert isinstance(response, LoginResponse)
        assert response.username == username
        assert response.message == "Authentication successful"
        assert response.token_type == "Bearer"
        assert response.expires_in == "1 hour"
        assert auth_service.validate_token(response.token) is True

    @pytest.mark.parametrize("username", [None, "", "   "])
    def test_login_rejects_blank_username(self, auth_service, username):
        with pytest.raises(InvalidInputError) as exc_info:
            auth_service.login(username)

        assert exc_info.value.message == "Username cannot be empty"

    def test_login_serialises_camel_case(self, auth_service):
        body = auth_service.login("bob").model_dump(by_alias=True)

        assert set(body) == {"token", "username", "message", "tokenType", "expiresIn"}

    def test_login_records_metrics(self, auth_service, metrics):
        auth_service.login("bob")
        with pytest.raises(InvalidInputError):
            auth_service.login("")

        assert metrics.registry.get_sample_value("login_attempts_total") == 2
        assert metrics.registry.get_sample_value("login_success_total") == 1
        assert metrics.registry.get_sample_value("login_failure_total") == 1
        assert metrics.business_metric_value("user_authenticated", username="bob") == 1.0


class TestValidateToken:
    """Test cases for token validation."""

    def test_validate_expired_token(self, test_settings, metrics):
        aged = TokenService(
            secret_key=test_settings.jwt_secret_key,
            clock=lambda: datetime.now(timezone.utc) - timedelta(hours=2),
        )
        service = AuthService(TokenService.from_settings(test_settings), metrics)

        assert service.validate_token(aged.issue("bob")) is False

    @pytest.mark.parametrize(
        "token",
        ["", None, "garbage", "{not json}", "a.b.c", "eyJhbGciOiJIUzI1NiJ9.e30."],
    )
    def test_validate_never_raises(self, auth_service, token):
        assert auth_service.validate_token(token) is False

    def test_validate_tampered_signature(self, auth_service):
        token = auth_service.login("bob").token
        head, _, signature = token.rpartition(".")
        tampered = f"{head}.{'A' if signature[0] != 'A' else 'B'}{signature[1:]}"

        assert auth_service.validate_token(tampered) is False

    def test_validate_swallows_unexpected_errors(self, metrics):
        token_service = MagicMock()
        token_service.verify.side_effect = RuntimeError("boom")
        service = AuthService(token_service, metrics)

        assert service.validate_token("anything") is False
        assert metrics.business_metric_value("token_validation_error", error="RuntimeError") == 1.0

    def test_validate_does_not_consult_store(self, auth_service):
        # Subject need not exist as a user
        token = auth_service.login("ghost-user-that-was-never-created").token

        assert auth_service.validate_token(token) is True


class TestSessions:
    """Test cases for logout and session views."""

    def test_logout_does_not_revoke_token(self, auth_service):
        token = auth_service.login("bob").token

        auth_service.logout_user("bob")

        assert auth_service.validate_token(token) is True

    def test_get_session(self, auth_service):
        session = auth_service.get_user_session("bob")

        assert isinstance(session, SessionView)
        assert session.username == "bob"
        assert session.active is True
        assert session.refreshed is None
        assert session.last_access > 0

    def test_refresh_session_is_flagged(self, auth_service):
        session = auth_service.refresh_user_session("bob")

        assert session.refreshed is True
        assert session.active is True

    def test_refresh_does_not_change_later_reads(self, auth_service):
        auth_service.refresh_user_session("bob")

        assert auth_service.get_user_session("bob").refreshed is None

    def test_session_is_recomputed(self, auth_service):
        first = auth_service.get_user_session("bob")
        second = auth_service.get_user_session("bob")

        assert second is not first
        assert second.last_access >= first.last_access

    def test_clear_caches_does_not_raise(self, auth_service, metrics):
        auth_service.clear_all_auth_caches()

        assert metrics.business_metric_value("auth_cache_cleared", cache_type="all") == 1.0


class TestIsUserAuthenticated:
    """is_user_authenticated is a blank-string check, not a security check."""

    @pytest.mark.parametrize("username", ["bob", " bob ", "nobody-with-a-token"])
    def test_non_blank_is_authenticated(self, auth_service, username):
        assert auth_service.is_user_authenticated(username) is True

    @pytest.mark.parametrize("username", [None, "", "   "])
    def test_blank_is_not_authenticated(self, auth_service, username):
        assert auth_service.is_user_authenticated(username) is False
