"""Shared fixtures: in-memory SQLite database, test settings and seed helpers."""

from sqlalchemy.pool import StaticPool

from storefront.core.config import Settings
from storefront.core.database import Database
from storefront.models import Base, Order, Product, Role, User

TEST_SECRET = "test-secret-do-not-use"


def make_database() -> Database:
    """Open a fresh in-memory SQLite database with all tables created."""
    database = Database(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    ).open()
    Base.metadata.create_all(database.engine)
    return database


def make_settings(assets_dir: str = "assets", **overrides: object) -> Settings:
    values: dict[str, object] = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "ASSETS_DIR": assets_dir,
        "PUBLIC_BASE_URL": "http://testserver",
    }
    values.update(overrides)
    return Settings(**values)


def add_user(session, uid: str, role: Role = Role.NONE, **fields: object) -> User:
    user = User(uid=uid, role=role, profile={}, **fields)
    session.add(user)
    session.commit()
    return user


def add_products(session, specs: list[dict]) -> list[Product]:
    """Insert products in order; later entries get higher ids (newer)."""
    products = []
    for spec in specs:
        values = {
            "name": "Item",
            "category": "general",
            "subtext": "",
            "stock": 5,
            "description": "",
            "price": 10.0,
            "discount": 0.0,
        }
        values.update(spec)
        product = Product(**values)
        session.add(product)
        session.flush()
        products.append(product)
    session.commit()
    return products


def add_order(session, order_id: int, owner_uid: str, status: str = "pending") -> Order:
    order = Order(
        id=order_id,
        owner_uid=owner_uid,
        items=[{"product_id": 1, "name": "Item", "price": 10.0, "quantity": 1}],
        total=10.0,
        status=status,
    )
    session.add(order)
    session.commit()
    return order
