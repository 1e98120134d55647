"""FastAPI auth dependencies — the authentication gate.

Learn: These are used as Depends() in route handlers to turn the raw
Authorization header into a verified identity, or reject the request
with 401 before any handler code runs.

The gate is a pure filter:
1. Header must be exactly "Bearer <token>" — otherwise 401, and the
   token codec is never called.
2. codec.verify() must succeed — otherwise 401. Bad signature, expiry,
   and garbage all get the same response; only the log says which.
3. The verified subject is handed to the route as CurrentIdentity.

No database access happens here.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from inkpress.auth.jwt import TokenCodec, TokenError
from inkpress.errors import Unauthenticated

logger = structlog.get_logger()

AUTH_FAILED = "Authentication required"


@dataclass(frozen=True)
class CurrentIdentity:
    """The verified identity making the request."""

    user_id: str


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from a "Bearer <token>" header value.

    Returns None if the header is missing or not exactly two
    space-separated parts with the "Bearer" scheme.
    """
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


def get_token_codec(request: Request) -> TokenCodec:
    """The codec built by create_app() at startup."""
    return request.app.state.token_codec


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
) -> CurrentIdentity:
    """Require a valid bearer token (401 otherwise)."""
    token = parse_bearer(authorization)
    if token is None:
        logger.info(
            "auth.header_rejected",
            reason="missing" if not authorization else "bad_format",
            path=request.url.path,
        )
        raise Unauthenticated(AUTH_FAILED)

    try:
        user_id = codec.verify(token)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=e.reason, path=request.url.path)
        raise Unauthenticated(AUTH_FAILED) from e

    identity = CurrentIdentity(user_id=user_id)
    request.state.identity = identity
    structlog.contextvars.bind_contextvars(user_id=user_id)
    return identity
