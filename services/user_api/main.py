"""User API Service - FastAPI application entry point.

Composes the request-handling path:
- Request Gate: bearer-token policy plus request/response metrics
- Auth: token issuance and validation (open routes)
- Users: token-protected CRUD, search and counts over the user store
- Metrics: Prometheus exposition and a text summary

Every component is constructed by ``create_app`` and kept on ``app.state``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from core.config.settings import Settings, get_settings
from core.exceptions import AppError, InternalError, UnauthorizedError
from core.models.common import HealthCheck
from core.security.jwt import TokenService
from services.user_api.cache import CountCache
from services.user_api.database import DatabaseManager, UserRepository
from services.user_api.metrics import MetricsSink
from services.user_api.middleware import log_requests, request_gate_middleware
from services.user_api.routers import auth_router, metrics_router, users_router
from services.user_api.workflows import AuthService, UserService

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown.

    Startup:
    - Create the users table

    Shutdown:
    - Dispose of the database engine
    """
    logger.info("Starting User API Service...")
    await app.state.db_manager.connect()
    logger.info("User API Service started successfully")

    yield

    logger.info("Shutting down User API Service...")
    await app.state.db_manager.disconnect()
    logger.info("User API Service shutdown complete")


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def _error_response(exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate errors into ``{"error": message}`` responses."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": _first_error_message(exc),
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return _error_response(InternalError(str(exc) or type(exc).__name__))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and every component it depends on.

    Args:
        settings: Settings to use instead of the environment-derived ones

    Returns:
        The configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="User API",
        description="User management API with JWT authentication and Prometheus metrics",
        version=settings.app_version,
        lifespan=lifespan,
    )

    metrics = MetricsSink(
        application=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )
    token_service = TokenService.from_settings(settings)
    db_manager = DatabaseManager(settings.database_url, echo=settings.database_echo)
    count_cache = CountCache(
        ttl_seconds=settings.count_cache_ttl_seconds,
        max_size=settings.count_cache_max_size,
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.token_service = token_service
    app.state.db_manager = db_manager
    app.state.count_cache = count_cache
    app.state.auth_service = AuthService(token_service, metrics)
    app.state.user_service = UserService(UserRepository(db_manager), metrics, count_cache)

    # Request Gate runs inside request logging
    app.middleware("http")(request_gate_middleware)
    app.middleware("http")(log_requests)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router, prefix=settings.api_v1_prefix)
    app.include_router(users_router, prefix=settings.api_v1_prefix)
    app.include_router(metrics_router)

    if settings.metrics_enabled:
        app.mount("/metrics/prometheus", make_asgi_app(registry=metrics.registry))

    @app.get("/health", response_model=HealthCheck)
    async def health_check() -> HealthCheck:
        """Basic health check endpoint for load balancers."""
        return HealthCheck(status="UP", service=settings.app_name)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.user_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
