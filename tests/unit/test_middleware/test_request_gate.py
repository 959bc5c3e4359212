"""Tests for the Request Gate middleware."""

from typing import Optional

import pytest
from fastapi import Request

from services.user_api.middleware.request_gate import bearer_token, is_api_path, requires_token

AUTH_PREFIX = "/api/v1/auth"


def _request(authorization: Optional[str] = None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/api/v1/users", "headers": headers})


class TestPolicy:
    """Test cases for which paths need a token."""

    @pytest.mark.parametrize(
        "path",
        [
            "/api/v1/users",
            "/api/v1/users/1",
            "/api/v1/users/search",
            "/api/v1/unknown",
            "/api/v2/users",
            "/api/v1/authentication",
        ],
    )
    def test_protected_paths(self, path):
        assert requires_token(path, AUTH_PREFIX) is True

    @pytest.mark.parametrize(
        "path",
        [
            "/api/v1/auth",
            "/api/v1/auth/login",
            "/api/v1/auth/validate",
            "/api/v1/auth/session/refresh/bob",
            "/health",
            "/metrics/summary",
            "/metrics/prometheus/",
            "/docs",
        ],
    )
    def test_open_paths(self, path):
        assert requires_token(path, AUTH_PREFIX) is False

    def test_is_api_path(self):
        assert is_api_path("/api/v1/users") is True
        assert is_api_path("/apis") is False
        assert is_api_path("/health") is False


class TestBearerToken:
    """Test cases for Authorization header parsing."""

    def test_bearer_header(self):
        assert bearer_token(_request("Bearer abc.def.ghi")) == "abc.def.ghi"

    @pytest.mark.parametrize(
        "header",
        [None, "", "Basic dXNlcjpwYXNz", "bearer abc", "Bearer ", "Token abc"],
    )
    def test_missing_or_other_scheme(self, header):
        assert bearer_token(_request(header)) is None


class TestGate:
    """Test cases for the gate wired into the application."""

    def test_missing_token_is_rejected(self, client, app):
        response = client.get("/api/v1/users")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert app.state.metrics.registry.get_sample_value("api_calls_failed_total") == 1

    def test_invalid_token_is_rejected(self, client):
        response = client.get("/api/v1/users", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_non_bearer_scheme_is_rejected(self, client):
        response = client.get("/api/v1/users", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_valid_token_passes(self, client, app, auth_headers):
        response = client.get("/api/v1/users", headers=auth_headers)

        assert response.status_code == 200
        registry = app.state.metrics.registry
        # Login plus listing
        assert registry.get_sample_value("api_calls_total") == 2
        assert registry.get_sample_value("api_calls_successful_total") == 2
        assert registry.get_sample_value("api_response_time_seconds_count") == 2
        assert registry.get_sample_value("response_size_bytes_count") == 2

    def test_request_size_is_recorded(self, client, app, auth_headers):
        client.post(
            "/api/v1/users",
            headers=auth_headers,
            json={"username": "sized", "email": "sized@example.com"},
        )

        registry = app.state.metrics.registry
        assert registry.get_sample_value("request_size_bytes_count") == 1
        assert registry.get_sample_value("request_size_bytes_sum") > 0

    def test_client_error_counts_as_failure(self, client, app, auth_headers):
        response = client.get("/api/v1/users/999", headers=auth_headers)

        assert response.status_code == 404
        assert app.state.metrics.registry.get_sample_value("api_calls_failed_total") == 1

    def test_non_api_paths_are_not_counted(self, client, app):
        client.get("/health")
        client.get("/metrics/summary")

        assert app.state.metrics.registry.get_sample_value("api_calls_total") == 0

    def test_auth_routes_are_open(self, client):
        response = client.get("/api/v1/auth/health")

        assert response.status_code == 200
        assert response.json()["service"] == "auth-service"


class TestRequestLogging:
    """Test cases for the request logging middleware."""

    def test_process_time_header(self, client):
        response = client.get("/health")

        assert float(response.headers["X-Process-Time-Ms"]) >= 0

    def test_logs_subject_of_verified_requests(self, client, auth_headers, caplog):
        with caplog.at_level("INFO", logger="services.user_api.middleware.logging"):
            client.get("/api/v1/users", headers=auth_headers)

        assert any(
            "GET /api/v1/users status=200" in record.getMessage()
            and "subject=bob" in record.getMessage()
            for record in caplog.records
        )
