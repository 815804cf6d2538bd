"""Profile routes for the caller and admin user management."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.v1.auth import get_current_identity, require_admin
from storefront.api.v1.params import page_params
from storefront.core.database import get_db
from storefront.core.errors import NotFound
from storefront.models import Role, User
from storefront.schemas.auth import TokenClaims
from storefront.schemas.envelope import DataEnvelope, Envelope
from storefront.schemas.user import AdminStatus, ProfileUpdate, UserOut, UserPage
from storefront.services.authorization import get_identity, is_admin
from storefront.services.identity import list_users, set_role, update_profile
from storefront.services.pagination import PageParams

router = APIRouter()


@router.get("/me", response_model=DataEnvelope[UserOut])
def get_me(
    claims: Annotated[TokenClaims, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[UserOut]:
    """Return the caller's stored profile."""
    user = get_identity(db, claims.external_id)
    if user is None:
        raise NotFound("User not found.")
    return DataEnvelope[UserOut](message="Got user info", data=UserOut.model_validate(user))


@router.post("/me", response_model=Envelope)
def update_me(
    body: ProfileUpdate,
    claims: Annotated[TokenClaims, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> Envelope:
    """Merge profile fields into the caller's record. The role cannot be changed here."""
    update_profile(db, claims.external_id, body.model_dump(exclude_unset=True))
    return Envelope(message="Profile updated.")


@router.get("/me/admin", response_model=DataEnvelope[AdminStatus])
def get_my_admin_status(
    claims: Annotated[TokenClaims, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[AdminStatus]:
    """Tell the client whether to show admin screens."""
    return DataEnvelope[AdminStatus](
        message="Got admin status",
        data=AdminStatus(admin=is_admin(db, claims.external_id)),
    )


@router.get("", response_model=UserPage)
def get_users(
    _admin: Annotated[User, Depends(require_admin)],
    params: Annotated[PageParams, Depends(page_params)],
    db: Annotated[Session, Depends(get_db)],
) -> UserPage:
    """List users (admin only), 15 per page, with `search` or `filter` (Admin, Customer)."""
    users, count = list_users(db, params)
    return UserPage(
        message="Got all users",
        data=[UserOut.model_validate(u) for u in users],
        user_count=count,
    )


@router.put("/{target_uid}/admin", response_model=DataEnvelope[UserOut])
def grant_admin(
    target_uid: str,
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[UserOut]:
    user = set_role(db, target_uid, Role.ADMIN)
    return DataEnvelope[UserOut](message="Made admin.", data=UserOut.model_validate(user))


@router.delete("/{target_uid}/admin", response_model=DataEnvelope[UserOut])
def revoke_admin(
    target_uid: str,
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[UserOut]:
    user = set_role(db, target_uid, Role.NONE)
    return DataEnvelope[UserOut](message="Removed admin.", data=UserOut.model_validate(user))
