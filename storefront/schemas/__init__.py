"""Pydantic request/response schemas."""

from storefront.schemas.auth import TokenClaims, TokenRequest
from storefront.schemas.envelope import DataEnvelope, Envelope
from storefront.schemas.health import HealthResponse
from storefront.schemas.order import (
    OrderCreate,
    OrderItem,
    OrderOut,
    OrderPage,
    OrderStatusUpdate,
    PaymentUpdate,
)
from storefront.schemas.product import ProductIn, ProductOut, ProductPage
from storefront.schemas.user import AdminStatus, ProfileUpdate, UserOut, UserPage

__all__ = [
    "AdminStatus",
    "DataEnvelope",
    "Envelope",
    "HealthResponse",
    "OrderCreate",
    "OrderItem",
    "OrderOut",
    "OrderPage",
    "OrderStatusUpdate",
    "PaymentUpdate",
    "ProductIn",
    "ProductOut",
    "ProductPage",
    "ProfileUpdate",
    "TokenClaims",
    "TokenRequest",
    "UserOut",
    "UserPage",
]
