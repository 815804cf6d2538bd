"""Schemas for orders, order status and payment updates."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.schemas.envelope import DataEnvelope


class OrderItem(BaseModel):
    """
    One line item as submitted at checkout.

    Only the product and quantity are taken from the client; any name or price
    sent along is ignored and read from the catalog instead.
    """

    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1, le=1000)


class OrderCreate(BaseModel):
    items: list[OrderItem] = Field(..., min_length=1, max_length=100)
    shipping: dict[str, Any] | None = Field(
        default=None, description="Free-form shipping details (address, phone, ...)"
    )


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=64)

    @field_validator("status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        s = v.strip().lower()
        if not s:
            raise ValueError("status must not be blank")
        return s


class PaymentUpdate(BaseModel):
    """Payment sub-fields to merge into the order; extra keys are kept."""

    model_config = ConfigDict(extra="allow")

    transaction_id: str | None = Field(default=None, max_length=255)
    method: str | None = Field(default=None, max_length=64)
    amount: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def require_some_field(self) -> "PaymentUpdate":
        if not self.model_dump(exclude_none=True):
            raise ValueError("at least one payment field is required")
        return self


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_uid: str
    items: list[dict[str, Any]]
    total: float
    status: str
    shipping: dict[str, Any] | None = None
    payment: dict[str, Any] | None = None
    created_at: datetime | None = None


class OrderPage(DataEnvelope[list[OrderOut]]):
    """One page of orders plus the total matching count."""

    order_count: int = Field(..., ge=0, serialization_alias="orderCount")
