"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The server
signs {sub, iat, exp} with a secret only it holds; nothing is stored
server-side. A token is trusted only after BOTH the signature and the
expiry check out — PyJWT verifies the signature first, then the claims.

Failures are split into three classes so logs can say *why* a token was
rejected. The auth gate collapses all three into one 401 so clients
can't tell which check failed.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class TokenError(Exception):
    """Raised when token verification fails."""

    reason = "invalid"


class MalformedToken(TokenError):
    reason = "malformed"


class BadSignature(TokenError):
    reason = "bad_signature"


class ExpiredToken(TokenError):
    reason = "expired"


class TokenCodec:
    """Issues and verifies signed, time-bounded identity tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(minutes=60),
        leeway: timedelta = timedelta(0),
    ):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self.leeway = leeway

    @classmethod
    def from_settings(cls, settings) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(minutes=settings.access_token_expire_minutes),
            leeway=timedelta(seconds=settings.token_leeway_seconds),
        )

    def issue(self, subject_id: str, *, now: Optional[datetime] = None) -> str:
        """Create a token for subject_id that expires `lifetime` from now."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Verify a token and return its subject id.

        Raises MalformedToken, BadSignature or ExpiredToken.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                leeway=self.leeway,
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredToken("Token has expired") from e
        except jwt.InvalidSignatureError as e:
            raise BadSignature("Token signature mismatch") from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(f"Invalid token: {e}") from e

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise MalformedToken("Token has no subject")
        return subject
