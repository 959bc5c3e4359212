"""Request logging middleware.

One line per request: method, path, status, duration and, on API routes
the Request Gate let through, the token subject. Server errors log at
WARNING; everything else at INFO.
"""

import logging
import time

from fastapi import Request

logger = logging.getLogger(__name__)

PROCESS_TIME_HEADER = "X-Process-Time-Ms"


async def log_requests(request: Request, call_next):
    """Log each request and stamp its duration on the response."""
    started = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - started) * 1000
        logger.warning(
            f"{request.method} {request.url.path} failed after {duration_ms:.2f}ms"
        )
        raise

    duration_ms = (time.perf_counter() - started) * 1000
    response.headers[PROCESS_TIME_HEADER] = f"{duration_ms:.2f}"

    subject = getattr(request.state, "subject", None)
    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    logger.log(
        level,
        f"{request.method} {request.url.path} "
        f"status={response.status_code} "
        f"duration={duration_ms:.2f}ms"
        + (f" subject={subject}" if subject else ""),
    )

    return response
