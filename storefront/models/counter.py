"""Named integer counters, incremented atomically in the database."""

from sqlalchemy import Column, Integer, String

from storefront.models.base import Base


class Counter(Base):
    """Last value issued for a named sequence (e.g. "orders")."""

    __tablename__ = "counters"

    name = Column(String(64), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
