"""FastAPI dependencies resolving the components built by the app factory."""

from fastapi import Request

from core.config.settings import Settings
from services.user_api.metrics import MetricsSink
from services.user_api.workflows import AuthService, UserService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics(request: Request) -> MetricsSink:
    return request.app.state.metrics


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
