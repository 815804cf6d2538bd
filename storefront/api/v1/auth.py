"""Token exchange and the access-gate dependencies (get_current_identity, require_admin)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.core.config import Settings, get_settings
from storefront.core.database import get_db
from storefront.core.errors import Forbidden, Unauthenticated
from storefront.core.security import decode_access_token
from storefront.models import User
from storefront.schemas.auth import TokenClaims, TokenRequest
from storefront.schemas.envelope import DataEnvelope
from storefront.services.authorization import authorize
from storefront.services.identity import upsert_identity

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


@router.put("/token", response_model=DataEnvelope[str])
def exchange_token(
    body: TokenRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DataEnvelope[str]:
    """
    Store (or refresh) the caller's identity and return a 24h access token.
    Send it back as `Authorization: Bearer <token>` together with a `uid` header.
    """
    fields = body.model_dump(exclude_unset=True, exclude={"uid"})
    token = upsert_identity(db, body.uid, fields, settings)
    return DataEnvelope[str](message="Got token", data=token)


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
    uid: Annotated[str | None, Header()] = None,
) -> TokenClaims:
    """
    Dependency: require a valid Bearer JWT whose subject matches the uid header.

    Missing or non-Bearer Authorization -> 401. A token that fails verification,
    or belongs to a different uid -> 403.
    """
    if credentials is None:
        raise Unauthenticated("unauthorized")
    try:
        claims = decode_access_token(credentials.credentials, settings)
    except Unauthenticated as e:
        logger.warning("Rejected access token: %s", e.message)
        raise Forbidden("forbidden access") from e
    if claims.external_id != uid:
        logger.warning("Token subject does not match uid header")
        raise Forbidden("forbidden access")
    return claims


def require_admin(
    claims: Annotated[TokenClaims, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Dependency: require an authenticated identity with the admin role. Raises 403 otherwise."""
    return authorize(db, claims.external_id)
