"""Request Gate middleware.

Per-request interceptor for API routes: starts the response timer,
records the request size, enforces the bearer-token policy on protected
routes, then records response size, elapsed time and success or failure
(success iff the final status is in [200, 400)).
"""

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from core.exceptions import TokenError

logger = logging.getLogger(__name__)

API_PATH_PREFIX = "/api/"
BEARER_PREFIX = "Bearer "


def is_api_path(path: str) -> bool:
    return path.startswith(API_PATH_PREFIX)


def requires_token(path: str, auth_prefix: str) -> bool:
    """Every API path outside the auth routes needs a bearer token."""
    if not is_api_path(path):
        return False
    return not (path == auth_prefix or path.startswith(auth_prefix + "/"))


def bearer_token(request: Request) -> Optional[str]:
    """Token from an ``Authorization: Bearer <token>`` header, if any."""
    header = request.headers.get("Authorization")
    if header and header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip() or None
    return None


def _content_length(value: Optional[str]) -> int:
    try:
        return int(value) if value else 0
    except ValueError:
        return 0


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def request_gate_middleware(request: Request, call_next):
    """Authenticate and instrument API requests."""
    path = request.url.path
    if not is_api_path(path):
        return await call_next(request)

    state = request.app.state
    metrics = state.metrics

    # START
    timer = metrics.start_api_response_timer()
    request_size = _content_length(request.headers.get("content-length"))
    if request_size > 0:
        metrics.record_request_size(request_size)

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    try:
        if requires_token(path, state.settings.auth_prefix):
            token = bearer_token(request)
            if token is None:
                logger.debug(f"Rejected {request.method} {path}: missing bearer token")
                response = _unauthorized("Authentication required")
                status_code = response.status_code
                return response
            try:
                token_data = state.token_service.verify(token)
            except TokenError as e:
                logger.debug(f"Rejected {request.method} {path}: {e}")
                response = _unauthorized("Invalid or expired token")
                status_code = response.status_code
                return response
            request.state.subject = token_data.sub

        # HANDLING
        response = await call_next(request)
        status_code = response.status_code

        response_size = _content_length(response.headers.get("content-length"))
        if response_size > 0:
            metrics.record_response_size(response_size)
        return response
    finally:
        # COMPLETE
        metrics.stop_api_response_timer(timer)
        metrics.record_api_call(200 <= status_code < 400)
