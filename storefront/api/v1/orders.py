"""Order routes: checkout and payment for customers, fulfillment for admins."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.v1.auth import get_current_identity, require_admin
from storefront.api.v1.params import order_id_header, page_params
from storefront.core.database import get_db
from storefront.models import User
from storefront.schemas.auth import TokenClaims
from storefront.schemas.envelope import DataEnvelope, Envelope
from storefront.schemas.order import (
    OrderCreate,
    OrderOut,
    OrderPage,
    OrderStatusUpdate,
    PaymentUpdate,
)
from storefront.services import orders
from storefront.services.pagination import PageParams

router = APIRouter()


@router.post("", response_model=DataEnvelope[OrderOut])
def place_order(
    body: OrderCreate,
    claims: Annotated[TokenClaims, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[OrderOut]:
    """Place an order for the caller. The order number comes from an atomic counter."""
    order = orders.create_order(db, claims.external_id, body)
    return DataEnvelope[OrderOut](message="Order placed.", data=OrderOut.model_validate(order))


@router.get("/mine", response_model=OrderPage)
def get_my_orders(
    claims: Annotated[TokenClaims, Depends(get_current_identity)],
    params: Annotated[PageParams, Depends(page_params)],
    db: Annotated[Session, Depends(get_db)],
) -> OrderPage:
    found, count = orders.list_orders(db, params, owner_uid=claims.external_id)
    return OrderPage(
        message="Got my orders",
        data=[OrderOut.model_validate(o) for o in found],
        order_count=count,
    )


@router.post("/payment", response_model=DataEnvelope[OrderOut])
def pay_order(
    body: PaymentUpdate,
    claims: Annotated[TokenClaims, Depends(get_current_identity)],
    order_id: Annotated[int, Depends(order_id_header)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[OrderOut]:
    """Record payment details on the caller's order (`id` header) and mark it paid."""
    order = orders.record_payment(
        db, order_id, claims.external_id, body.model_dump(exclude_none=True)
    )
    return DataEnvelope[OrderOut](message="Payment recorded.", data=OrderOut.model_validate(order))


@router.get("", response_model=OrderPage)
def get_all_orders(
    _admin: Annotated[User, Depends(require_admin)],
    params: Annotated[PageParams, Depends(page_params)],
    db: Annotated[Session, Depends(get_db)],
) -> OrderPage:
    """All orders (admin only), 15 per page; `filter` by status or `search` by owner/status."""
    found, count = orders.list_orders(db, params)
    return OrderPage(
        message="Got all orders",
        data=[OrderOut.model_validate(o) for o in found],
        order_count=count,
    )


@router.get("/single", response_model=DataEnvelope[OrderOut])
def get_single_order(
    _admin: Annotated[User, Depends(require_admin)],
    order_id: Annotated[int, Depends(order_id_header)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[OrderOut]:
    order = orders.get_order(db, order_id)
    return DataEnvelope[OrderOut](message="Got single order", data=OrderOut.model_validate(order))


@router.post("/status", response_model=DataEnvelope[OrderOut])
def update_order_status(
    body: OrderStatusUpdate,
    _admin: Annotated[User, Depends(require_admin)],
    order_id: Annotated[int, Depends(order_id_header)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[OrderOut]:
    order = orders.set_status(db, order_id, body.status)
    return DataEnvelope[OrderOut](message="Order status updated.", data=OrderOut.model_validate(order))


@router.delete("", response_model=Envelope)
def remove_order(
    _admin: Annotated[User, Depends(require_admin)],
    order_id: Annotated[int, Depends(order_id_header)],
    db: Annotated[Session, Depends(get_db)],
) -> Envelope:
    orders.delete_order(db, order_id)
    return Envelope(message="Order deleted.")
