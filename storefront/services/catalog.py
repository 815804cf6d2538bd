"""Catalog operations: product CRUD and the admin product listing."""

import logging

from sqlalchemy.orm import Session

from storefront.core.errors import NotFound
from storefront.models import Product
from storefront.schemas.product import ProductIn
from storefront.services.pagination import PageParams, build_page_query, fetch_page

logger = logging.getLogger(__name__)

PRODUCT_FILTERS = {
    "Stock out": Product.stock == 0,
    "In stock": Product.stock > 0,
    "Discounted": Product.discount > 0,
}
PRODUCT_SEARCH_COLUMNS = (Product.name, Product.description, Product.category)


def list_products(session: Session, params: PageParams) -> tuple[list[Product], int]:
    """One page of products for the admin catalog, plus the matching count."""
    query = build_page_query(
        params,
        PRODUCT_FILTERS,
        PRODUCT_SEARCH_COLUMNS,
        newest_first=Product.id.desc(),
    )
    return fetch_page(session, Product, query)


def list_by_category(session: Session, category: str | None) -> list[Product]:
    """Public listing: every product in category, newest first."""
    return (
        session.query(Product)
        .filter(Product.category == (category or ""))
        .order_by(Product.id.desc())
        .all()
    )


def get_product(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found.")
    return product


def create_product(session: Session, data: ProductIn, image_url: str) -> Product:
    product = Product(**data.model_dump(), image=image_url)
    session.add(product)
    session.commit()
    session.refresh(product)
    logger.info("Product created: id=%s name=%s", product.id, product.name)
    return product


def update_product(
    session: Session,
    product_id: int,
    data: ProductIn,
    image_url: str | None = None,
) -> Product:
    """Overwrite the product fields; the image is replaced only when a new one was uploaded."""
    product = get_product(session, product_id)
    for key, value in data.model_dump().items():
        setattr(product, key, value)
    if image_url:
        product.image = image_url
    session.commit()
    session.refresh(product)
    logger.info("Product updated: id=%s", product.id)
    return product


def delete_product(session: Session, product_id: int) -> None:
    product = get_product(session, product_id)
    session.delete(product)
    session.commit()
    logger.info("Product deleted: id=%s", product_id)
