"""Schemas for identity profiles and the admin user listing."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from storefront.models.user import Role
from storefront.schemas.envelope import DataEnvelope


class ProfileUpdate(BaseModel):
    """Profile fields to merge; unknown keys are kept in the profile document."""

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    photo_url: str | None = Field(
        default=None,
        max_length=2048,
        validation_alias=AliasChoices("photo_url", "photoURL"),
    )


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    role: Role
    name: str | None = None
    email: str | None = None
    photo_url: str | None = None
    profile: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class AdminStatus(BaseModel):
    admin: bool


class UserPage(DataEnvelope[list[UserOut]]):
    """One page of users plus the total matching count."""

    user_count: int = Field(..., ge=0, serialization_alias="userCount")
