"""Pytest configuration and shared fixtures for all tests."""

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.config.settings import Settings
from core.security.jwt import TokenService
from services.user_api.cache import CountCache
from services.user_api.database import DatabaseManager, UserRepository
from services.user_api.main import create_app
from services.user_api.metrics import MetricsSink
from services.user_api.workflows import AuthService, UserService

TEST_SECRET_KEY = "test-secret-key-do-not-use-in-production"


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with appropriate defaults."""
    return Settings(
        environment="testing",
        debug=True,
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key=TEST_SECRET_KEY,
        count_cache_ttl_seconds=60,
    )


@pytest.fixture
def metrics() -> MetricsSink:
    """Fresh metrics sink with its own registry."""
    return MetricsSink(environment="testing")


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService.from_settings(test_settings)


@pytest.fixture
def auth_service(token_service, metrics) -> AuthService:
    return AuthService(token_service, metrics)


@pytest_asyncio.fixture
async def db_manager(test_settings) -> AsyncGenerator[DatabaseManager, None]:
    """In-memory database with tables created."""
    manager = DatabaseManager(test_settings.database_url)
    await manager.connect()
    yield manager
    await manager.disconnect()


@pytest.fixture
def repository(db_manager) -> UserRepository:
    return UserRepository(db_manager)


@pytest.fixture
def count_cache(test_settings) -> CountCache:
    return CountCache(ttl_seconds=test_settings.count_cache_ttl_seconds, max_size=10)


@pytest.fixture
def user_service(repository, metrics, count_cache) -> UserService:
    return UserService(repository, metrics, count_cache)


@pytest.fixture
def app(test_settings) -> FastAPI:
    return create_app(test_settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Test client; entering it runs the lifespan (table creation)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client) -> dict[str, str]:
    """Authorization header for a freshly logged-in user."""
    response = client.post("/api/v1/auth/login", params={"username": "bob"})
    return {"Authorization": f"Bearer {response.json()['token']}"}
