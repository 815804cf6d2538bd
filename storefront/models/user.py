"""ORM model for customer identities (external id, role, profile)."""

import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String, func

from storefront.models.base import Base, JSONType


class Role(str, enum.Enum):
    """Closed set of roles; only ADMIN grants elevated privileges."""

    NONE = "none"
    ADMIN = "admin"


class User(Base):
    """
    Identity keyed by the external provider's id (uid).

    name, email and photo_url are promoted to columns so they can be searched;
    any other profile field lands in the profile JSON.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(
        Enum(
            Role,
            native_enum=False,
            length=16,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=Role.NONE,
    )
    name = Column(String(255), nullable=True)
    email = Column(String(320), nullable=True, index=True)
    photo_url = Column(String(2048), nullable=True)
    profile = Column(JSONType, nullable=False, default=dict)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
