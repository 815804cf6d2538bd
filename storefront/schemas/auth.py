"""Request/response schemas for token exchange and the access gate."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TokenRequest(BaseModel):
    """Identity payload sent by the client after signing in with the identity provider."""

    model_config = ConfigDict(extra="allow")

    uid: str = Field(..., min_length=1, max_length=255, description="External id")
    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    photo_url: str | None = Field(
        default=None,
        max_length=2048,
        validation_alias=AliasChoices("photo_url", "photoURL"),
    )


class TokenClaims(BaseModel):
    """Identity claim decoded from a verified access token."""

    external_id: str
