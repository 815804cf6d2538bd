"""Identity upsert, profile updates and admin role changes."""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.errors import InvalidInput, NotFound
from storefront.core.security import create_access_token
from storefront.models import Role, User
from storefront.services.authorization import get_identity
from storefront.services.pagination import PageParams, build_page_query, fetch_page

if TYPE_CHECKING:
    from storefront.core.config import Settings

logger = logging.getLogger(__name__)

# Profile keys stored as columns; everything else goes to User.profile.
COLUMN_FIELDS = ("name", "email", "photo_url")
# Never writable through profile data.
PROTECTED_FIELDS = frozenset({"uid", "role", "id", "created_at", "updated_at"})


def _split_profile(fields: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (column values, extra profile values) with protected keys dropped."""
    columns: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in fields.items():
        if key in PROTECTED_FIELDS:
            continue
        if key in COLUMN_FIELDS:
            if value is not None:
                columns[key] = value
        else:
            extra[key] = value
    return columns, extra


def _apply_profile(user: User, fields: Mapping[str, Any]) -> None:
    columns, extra = _split_profile(fields)
    for key, value in columns.items():
        setattr(user, key, value)
    if extra:
        # Reassign so the JSON column is flagged dirty.
        user.profile = {**(user.profile or {}), **extra}


def update_profile(session: Session, external_id: str, fields: Mapping[str, Any]) -> User:
    """
    Insert-or-update the identity for external_id with fields. Role is never
    touched: new identities start as Role.NONE, existing ones keep theirs.
    """
    if not external_id or not external_id.strip():
        raise InvalidInput("uid is required")
    user = get_identity(session, external_id)
    if user is None:
        user = User(uid=external_id, role=Role.NONE, profile={})
        _apply_profile(user, fields)
        session.add(user)
        try:
            session.flush()
            logger.info("Identity created: uid=%s", external_id)
        except IntegrityError:
            # Created concurrently by another request; update that row instead.
            session.rollback()
            user = get_identity(session, external_id)
            if user is None:
                raise
            _apply_profile(user, fields)
    else:
        _apply_profile(user, fields)
    session.commit()
    session.refresh(user)
    return user


def upsert_identity(
    session: Session,
    external_id: str,
    profile_fields: Mapping[str, Any],
    settings: "Settings",
) -> str:
    """Store the identity (see update_profile) and mint a fresh access token for it."""
    update_profile(session, external_id, profile_fields)
    return create_access_token(external_id, settings)


def set_role(session: Session, external_id: str, role: Role) -> User:
    """Grant or revoke admin on an existing identity."""
    user = get_identity(session, external_id)
    if user is None:
        raise NotFound("User not found.")
    if user.role is not role:
        previous = user.role
        user.role = role
        session.commit()
        session.refresh(user)
        logger.info(
            "Role changed: uid=%s %s -> %s", external_id, previous.value, role.value
        )
    return user


USER_FILTERS = {
    "Admin": User.role == Role.ADMIN,
    "Customer": User.role == Role.NONE,
}
USER_SEARCH_COLUMNS = (User.uid, User.name, User.email)


def list_users(session: Session, params: PageParams) -> tuple[list[User], int]:
    """One page of identities for the admin user listing, plus the matching count."""
    query = build_page_query(
        params,
        USER_FILTERS,
        USER_SEARCH_COLUMNS,
        newest_first=User.id.desc(),
    )
    return fetch_page(session, User, query)
