"""JWT token issuance and verification using python-jose."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError
from pydantic import BaseModel

from core.config.settings import Settings
from core.exceptions import (
    ExpiredTokenError,
    InvalidInputError,
    InvalidSignatureError,
    MalformedTokenError,
)

logger = logging.getLogger(__name__)


class TokenData(BaseModel):
    """Verified token payload."""

    sub: str  # Username
    exp: Optional[datetime] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens.

    Tokens are self-contained: nothing is persisted, so a token stays valid
    until its ``exp`` claim regardless of logouts.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the token service.

        Args:
            secret_key: HMAC secret used to sign tokens
            algorithm: JWS algorithm
            lifetime: Time between issuance and expiry
            clock: Source of the current UTC time
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        """Build a token service from application settings."""
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(minutes=settings.access_token_expire_minutes),
        )

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, subject: Optional[str]) -> str:
        """
        Create a signed token for the given subject.

        Args:
            subject: Username to embed as the ``sub`` claim

        Returns:
            The encoded JWT

        Raises:
            InvalidInputError: If the subject is empty or blank
        """
        if subject is None or not subject.strip():
            raise InvalidInputError("Token subject cannot be empty")

        issued_at = self._clock()
        claims = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self._lifetime,
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> TokenData:
        """
        Verify a token and return its payload.

        Args:
            token: The encoded JWT

        Returns:
            TokenData for a valid token

        Raises:
            MalformedTokenError: If the token cannot be decoded or lacks a subject
            ExpiredTokenError: If the token is past its expiry
            InvalidSignatureError: If the signature check fails
        """
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Token is empty")

        # Parse first so structural damage is told apart from a bad signature
        try:
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError(f"Malformed token: {e}") from e

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except JWTClaimsError as e:
            raise MalformedTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            raise InvalidSignatureError(f"Invalid token signature: {e}") from e

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise MalformedTokenError("Token has no subject")

        exp = payload.get("exp")
        return TokenData(
            sub=sub,
            exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp is not None else None,
        )

    def extract_subject(self, token: Optional[str]) -> Optional[str]:
        """
        Read the subject without verifying the token.

        Only for log and metric annotation, never for access decisions.
        """
        if not token or not isinstance(token, str):
            return None
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            return None
        sub = claims.get("sub")
        return sub if isinstance(sub, str) else None
