"""SQLAlchemy ORM models."""

from storefront.models.base import Base
from storefront.models.counter import Counter
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.user import Role, User

__all__ = ["Base", "Counter", "Order", "Product", "Role", "User"]
