"""Schemas for catalog products."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.envelope import DataEnvelope


class ProductIn(BaseModel):
    """Validated product fields from the multipart create/edit forms."""

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=255)
    subtext: str = Field(default="", max_length=1024)
    stock: int = Field(..., ge=0)
    description: str = Field(default="")
    price: float = Field(..., ge=0)
    discount: float = Field(default=0.0, ge=0)


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    subtext: str
    stock: int
    description: str
    price: float
    discount: float
    image: str | None = None
    created_at: datetime | None = None


class ProductPage(DataEnvelope[list[ProductOut]]):
    """One page of products plus the total matching count."""

    product_count: int = Field(..., ge=0, serialization_alias="productCount")
