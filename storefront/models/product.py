"""ORM model for catalog products."""

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String, Text, func

from storefront.models.base import Base


class Product(Base):
    """Catalog entry. Higher id means more recently inserted."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("discount >= 0", name="ck_products_discount_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False, index=True)
    subtext = Column(String(1024), nullable=False, default="")
    stock = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    discount = Column(Float, nullable=False, default=0.0)
    image = Column(String(2048), nullable=True)
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
