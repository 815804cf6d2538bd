"""JWT creation and verification for access tokens bound to an external id."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

from storefront.core.errors import Unauthenticated
from storefront.schemas.auth import TokenClaims

if TYPE_CHECKING:
    from storefront.core.config import Settings


def create_access_token(external_id: str, settings: "Settings") -> str:
    """Create a JWT access token with sub (external id), iat, exp and a random jti."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": external_id,
        "exp": expire,
        "iat": now,
        # Tokens minted in the same second must still differ.
        "jti": uuid.uuid4().hex,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str | None, settings: "Settings") -> TokenClaims:
    """
    Decode and validate a JWT; return the identity claim.
    Raises Unauthenticated on a missing, malformed, expired or forged token.
    """
    if not token or not token.strip():
        raise Unauthenticated("Missing access token")
    secret = settings.JWT_SECRET.get_secret_value()
    try:
        payload = jwt.decode(
            token.strip(),
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError as e:
        raise Unauthenticated("Invalid or expired token") from e
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise Unauthenticated("Invalid token payload")
    return TokenClaims(external_id=sub)
