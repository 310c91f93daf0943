"""Access token issuance and verification (JWT via python-jose)."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from tasksync.c1_errors import UnauthenticatedError

logger = logging.getLogger(__name__)


class TokenIssuer:
    """Signs and verifies bearer tokens whose subject is a user id."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 7 * 24 * 60):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Issue a signed token for ``user_id``."""
        now = datetime.now(timezone.utc)
        expires_at = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        claims = {"sub": user_id, "iat": now, "exp": expires_at}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def resolve(self, token: Optional[str]) -> str:
        """Verify ``token`` and return its subject.

        Raises:
            UnauthenticatedError: if the token is missing, malformed, expired
                or has no subject
        """
        if not token:
            raise UnauthenticatedError("No token provided")

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.debug("Rejected expired token")
            raise UnauthenticatedError("Token expired")
        except JWTError as e:
            logger.debug(f"Rejected invalid token: {e}")
            raise UnauthenticatedError("Invalid token")

        subject = payload.get("sub")
        if not subject or not isinstance(subject, str):
            raise UnauthenticatedError("Invalid token")
        return subject
