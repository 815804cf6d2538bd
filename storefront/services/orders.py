"""Order placement, numbering, payment and fulfillment status."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.errors import InvalidInput, NotFound
from storefront.models import Counter, Order, Product
from storefront.schemas.order import OrderCreate
from storefront.services.pagination import PageParams, build_page_query, fetch_page

logger = logging.getLogger(__name__)

ORDER_COUNTER = "orders"
PAID_STATUS = "paid"

ORDER_FILTERS = {
    label: Order.status == label.lower()
    for label in ("Pending", "Paid", "Shipped", "Delivered", "Cancelled")
}
ORDER_SEARCH_COLUMNS = (Order.owner_uid, Order.status)


def next_order_id(session: Session) -> int:
    """
    Reserve the next order number.

    A single UPDATE ... RETURNING increments the counter row, so concurrent
    callers always get distinct, increasing numbers. The row is seeded by the
    initial migration; if it is missing the first caller creates it, and a
    caller that loses that insert race falls back to the increment.
    """
    stmt = (
        update(Counter)
        .where(Counter.name == ORDER_COUNTER)
        .values(value=Counter.value + 1)
        .returning(Counter.value)
        .execution_options(synchronize_session=False)
    )
    value = session.execute(stmt).scalar_one_or_none()
    if value is not None:
        return value
    try:
        with session.begin_nested():
            session.add(Counter(name=ORDER_COUNTER, value=1))
    except IntegrityError:
        logger.info("Order counter created concurrently; incrementing instead")
        return session.execute(stmt).scalar_one()
    return 1


def price_items(session: Session, data: OrderCreate) -> list[dict[str, Any]]:
    """
    Build stored line items from the catalog.

    Name and unit price always come from the product row; the unit price is
    the list price less the product's discount, never below zero.
    """
    items = []
    for item in data.items:
        product = session.get(Product, item.product_id)
        if product is None:
            raise InvalidInput(f"Unknown product: {item.product_id}")
        items.append(
            {
                "product_id": product.id,
                "name": product.name,
                "price": round(max(product.price - (product.discount or 0.0), 0.0), 2),
                "quantity": item.quantity,
            }
        )
    return items


def order_total(items: list[dict[str, Any]]) -> float:
    return round(sum(item["price"] * item["quantity"] for item in items), 2)


def create_order(session: Session, owner_uid: str, data: OrderCreate) -> Order:
    items = price_items(session, data)
    order = Order(
        id=next_order_id(session),
        owner_uid=owner_uid,
        items=items,
        total=order_total(items),
        status="pending",
        shipping=data.shipping,
    )
    session.add(order)
    session.commit()
    session.refresh(order)
    logger.info("Order created: id=%s owner=%s total=%s", order.id, owner_uid, order.total)
    return order


def list_orders(
    session: Session, params: PageParams, owner_uid: str | None = None
) -> tuple[list[Order], int]:
    """One page of orders; restricted to owner_uid when given."""
    query = build_page_query(
        params,
        ORDER_FILTERS,
        ORDER_SEARCH_COLUMNS,
        newest_first=Order.id.desc(),
        scope=Order.owner_uid == owner_uid if owner_uid is not None else None,
    )
    return fetch_page(session, Order, query)


def get_order(session: Session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found.")
    return order


def set_status(session: Session, order_id: int, status: str) -> Order:
    order = get_order(session, order_id)
    previous = order.status
    order.status = status
    session.commit()
    session.refresh(order)
    logger.info("Order status changed: id=%s %s -> %s", order_id, previous, status)
    return order


def record_payment(
    session: Session, order_id: int, owner_uid: str, fields: Mapping[str, Any]
) -> Order:
    """
    Merge payment sub-fields into the caller's own order and mark it paid.

    Orders that belong to someone else are reported as not found.
    """
    order = (
        session.query(Order)
        .filter(Order.id == order_id, Order.owner_uid == owner_uid)
        .first()
    )
    if order is None:
        raise NotFound("Order not found.")
    order.payment = {**(order.payment or {}), **fields}
    order.status = PAID_STATUS
    session.commit()
    session.refresh(order)
    logger.info("Payment recorded: order=%s owner=%s", order_id, owner_uid)
    return order


def delete_order(session: Session, order_id: int) -> None:
    order = get_order(session, order_id)
    session.delete(order)
    session.commit()
    logger.info("Order deleted: id=%s", order_id)
