"""ORM model for customer orders."""

from sqlalchemy import Column, DateTime, Float, Integer, String, func

from storefront.models.base import Base, JSONType


class Order(Base):
    """
    Order placed by an identity.

    id is the human-facing order number taken from the "orders" counter
    (see services.orders.next_order_id), not a database autoincrement.
    """

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=False)
    owner_uid = Column(String(255), nullable=False, index=True)
    items = Column(JSONType, nullable=False, default=list)
    total = Column(Float, nullable=False, default=0.0)
    status = Column(String(64), nullable=False, default="pending", index=True)
    shipping = Column(JSONType, nullable=True)
    payment = Column(JSONType, nullable=True)
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
