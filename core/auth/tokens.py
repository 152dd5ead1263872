"""
Session tokens (stateless JWT).

A token binds a request to a user id until its embedded expiry. The server
keeps no session table, so a token cannot be revoked before it expires; the
``jti`` claim is carried so a denylist can be consulted at verify time if
revocation is ever needed.

The signing secret is process-wide and loaded once at startup.
"""
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from core.config import DEFAULT_TOKEN_TTL_SECONDS
from core.errors import Expired, InvalidSignature, MissingToken
from core.logging import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    issued_at: datetime
    expires_at: datetime
    token_id: str | None = None


class TokenService:
    """Mints and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def issue(self, user_id: str) -> str:
        # NumericDate allows fractions; keeping them makes the window exactly ttl long
        issued_at = self._clock().timestamp()
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.ttl.total_seconds(),
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str | None) -> SessionClaims:
        """
        Check signature, then expiry, and return the embedded claims.

        Raises:
            MissingToken: no token supplied
            InvalidSignature: signature mismatch or malformed token
            Expired: now is at or past expiresAt
        """
        if not token:
            raise MissingToken()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                # Expiry is checked below against the injected clock
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", type(e).__name__)
            raise InvalidSignature() from e

        try:
            claims = SessionClaims(
                user_id=str(payload["sub"]),
                issued_at=datetime.fromtimestamp(float(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(float(payload["exp"]), tz=timezone.utc),
                token_id=payload.get("jti"),
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidSignature() from e

        if self._clock().timestamp() >= float(payload["exp"]):
            raise Expired()

        return claims

    def verify(self, token: str | None) -> str:
        """Return the user id a valid token was issued for.

        Does not check that the user still exists; downstream lookups report NotFound.
        """
        return self.decode(token).user_id
