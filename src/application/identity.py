"""Caller identity resolution from bearer tokens."""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from jose import JWTError, jwt

from ..domain.entities.practice_session import utc_now
from ..domain.errors import AuthenticationError

logger = logging.getLogger(__name__)


class JWTIdentityProvider:
    """Resolves the caller id from a signed JWT.

    The caller id is the ``sub`` claim. Signature, expiry and (when
    configured) audience are verified by ``jose``.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", audience: Optional[str] = None):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def resolve_caller_id(self, token: Optional[str]) -> str:
        """
        Verify a token and return its caller id.

        Raises:
            AuthenticationError: If the token is missing, invalid, expired, or has no subject.
        """
        if not token:
            raise AuthenticationError("User is not authenticated.")

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise AuthenticationError("Invalid or expired token.") from e

        caller_id = claims.get("sub")
        if not caller_id:
            logger.warning("Rejected bearer token without a subject claim")
            raise AuthenticationError("Token does not identify a user.")
        return str(caller_id)

    def issue_token(self, caller_id: str, expires_in: timedelta = timedelta(hours=1), now: Optional[datetime] = None) -> str:
        """Mint a token for ``caller_id``. Used by local tooling and tests."""
        issued_at = now or utc_now()
        claims: dict[str, Any] = {
            "sub": caller_id,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + expires_in).timestamp()),
        }
        if self.audience is not None:
            claims["aud"] = self.audience
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)
