# =============================================================================
# JWT Access Tokens
# =============================================================================
#
# Self-contained, signed identity assertions:
#   - sub: the user id (as a string)
#   - iat: issued at
#   - exp: iat + a fixed lifetime
#
# Nothing is stored server-side. A token stops working when it expires, when
# the signing secret changes, or when its subject is deleted (checked by the
# auth gate, not here).
#
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt
from pydantic import BaseModel

from scribe.config import Settings
from scribe.core.errors import InvalidTokenError
from scribe.core.utils import utc_now

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Validated JWT claims."""

    sub: int
    iat: datetime
    exp: datetime


class TokenService:
    """Issues and verifies access tokens with one process-wide secret."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(hours=settings.jwt_expire_hours),
        )

    def issue(self, user_id: int) -> str:
        """Create a signed token for ``user_id``."""
        now = self._clock()
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.lifetime,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenPayload:
        """
        Decode and validate a token.

        Raises:
            InvalidTokenError: bad signature, malformed, missing claims,
                non-numeric subject, or expired. The cause is logged but
                never distinguished to the caller.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                # Time claims are checked below against the injected clock.
                options={"require": ["sub", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
            claims = TokenPayload(
                sub=int(payload["sub"]),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (jwt.InvalidTokenError, ValueError, TypeError, OverflowError, OSError) as e:
            logger.debug("Rejected invalid token: %s", e)
            raise InvalidTokenError()

        now = self._clock()
        if claims.exp <= now:
            logger.debug("Rejected expired token")
            raise InvalidTokenError()
        if claims.iat > now:
            logger.debug("Rejected token issued in the future")
            raise InvalidTokenError()
        return claims

    def verify(self, token: str) -> int:
        """Return the subject's user id, or raise ``InvalidTokenError``."""
        return self.decode(token).sub
