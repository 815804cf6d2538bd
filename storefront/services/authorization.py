"""Role authorization: decide whether an external id holds admin privileges."""

import logging

from sqlalchemy.orm import Session

from storefront.core.errors import Forbidden
from storefront.models import Role, User

logger = logging.getLogger(__name__)


def get_identity(session: Session, external_id: str) -> User | None:
    """Load the identity for external_id, or None."""
    return session.query(User).filter(User.uid == external_id).first()


def authorize(session: Session, external_id: str) -> User:
    """
    Require that external_id belongs to an admin. Returns the User.

    Raises Forbidden when no identity exists or its role is not ADMIN. Call
    only after the token has been verified.
    """
    user = get_identity(session, external_id)
    if user is None:
        logger.warning("Admin check failed: no identity for uid=%s", external_id)
        raise Forbidden("forbidden access")
    if user.role is Role.ADMIN:
        return user
    logger.warning("Admin check failed: uid=%s role=%s", external_id, user.role.value)
    raise Forbidden("forbidden access")


def is_admin(session: Session, external_id: str) -> bool:
    """Non-raising form of authorize, for the "am I admin" lookup."""
    user = get_identity(session, external_id)
    return user is not None and user.role is Role.ADMIN
