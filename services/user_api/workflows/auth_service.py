"""Authentication workflow.

Login issues a token for any non-blank username; no credentials are
checked and no session state is kept. Logout and session refresh are
recorded but change nothing: a token stays valid until it expires.
"""

import logging
import time
from typing import Optional

from core.exceptions import InvalidInputError, TokenError
from core.security.jwt import TokenService
from services.user_api.metrics import MetricsSink
from services.user_api.schemas.auth import LoginResponse, SessionView

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthService:
    """Login, token validation and session views."""

    def __init__(self, token_service: TokenService, metrics: MetricsSink):
        self._tokens = token_service
        self._metrics = metrics

    def login(self, username: Optional[str]) -> LoginResponse:
        """
        Issue a bearer token for a username.

        Args:
            username: Subject of the new token

        Returns:
            LoginResponse carrying the token

        Raises:
            InvalidInputError: If the username is missing or blank
        """
        logger.debug(f"Authenticating user: {username}")

        if _is_blank(username):
            self._metrics.record_login_attempt(success=False)
            self._metrics.record_business_metric(
                "authentication_failed", 1.0, reason="empty_username"
            )
            raise InvalidInputError("Username cannot be empty")

        token = self._tokens.issue(username)
        self._metrics.record_login_attempt(success=True)
        self._metrics.record_business_metric("user_authenticated", 1.0, username=username)
        logger.info(f"User authenticated successfully: {username}")

        return LoginResponse(
            token=token,
            username=username,
            message="Authentication successful",
            token_type="Bearer",
            expires_in="1 hour",
        )

    def validate_token(self, token: Optional[str]) -> bool:
        """
        Check a token. Never raises; every failure is reported as False.
        """
        logger.debug("Validating JWT token")
        try:
            token_data = self._tokens.verify(token)
        except TokenError as e:
            logger.debug(f"Token validation failed: {e}")
            self._metrics.record_business_metric(
                "token_validation_failed", 1.0, reason=type(e).__name__
            )
            return False
        except Exception as e:
            logger.warning(f"Token validation error: {e}")
            self._metrics.record_business_metric(
                "token_validation_error", 1.0, error=type(e).__name__
            )
            return False

        logger.debug(f"Token validation successful for user: {token_data.sub}")
        self._metrics.record_business_metric("token_validated", 1.0, username=token_data.sub)
        return True

    def token_subject(self, token: Optional[str]) -> Optional[str]:
        """Unverified subject of a token, for annotation only."""
        return self._tokens.extract_subject(token)

    def logout_user(self, username: Optional[str]) -> None:
        """Record a logout. Tokens already issued stay valid."""
        logger.info(f"User logged out: {username}")
        self._metrics.record_business_metric("user_logged_out", 1.0, username=username)

    def get_user_session(self, username: Optional[str]) -> SessionView:
        """Compute a fresh session view; nothing is stored."""
        logger.debug(f"Getting session info for user: {username}")
        self._metrics.record_business_metric("session_retrieved", 1.0, username=username)
        return SessionView(username=username, last_access=_now_millis(), active=True)

    def refresh_user_session(self, username: Optional[str]) -> SessionView:
        """Same as get_user_session, flagged as refreshed. No state changes."""
        logger.debug(f"Refreshing session for user: {username}")
        self._metrics.record_business_metric("session_refreshed", 1.0, username=username)
        return SessionView(
            username=username, last_access=_now_millis(), active=True, refreshed=True
        )

    def is_user_authenticated(self, username: Optional[str]) -> bool:
        """
        True iff the username is non-blank.

        This is a string check only: no token, session or store is
        consulted, so it must not be used as an access decision.
        """
        logger.debug(f"Checking authentication status for user: {username}")
        authenticated = not _is_blank(username)
        self._metrics.record_business_metric(
            "auth_status_checked",
            1.0,
            username=username,
            authenticated=str(authenticated).lower(),
        )
        return authenticated

    def clear_all_auth_caches(self) -> None:
        """Record a cache clear. Authentication keeps no caches."""
        logger.info("Clearing all authentication caches")
        self._metrics.record_business_metric("auth_cache_cleared", 1.0, cache_type="all")


def _now_millis() -> int:
    return int(time.time() * 1000)
