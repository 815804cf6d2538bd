"""Catalog routes: public browsing by category and admin product management."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from storefront.api.v1.auth import require_admin
from storefront.api.v1.params import page_params, product_id_header
from storefront.core.config import Settings, get_settings
from storefront.core.database import get_db
from storefront.core.errors import InvalidInput
from storefront.models import User
from storefront.schemas.envelope import DataEnvelope, Envelope
from storefront.schemas.product import ProductIn, ProductOut, ProductPage
from storefront.services import catalog
from storefront.services.pagination import PageParams
from storefront.services.uploads import discard_image, store_image

router = APIRouter()


def product_form(
    name: Annotated[str, Form()],
    category: Annotated[str, Form()],
    stock: Annotated[str, Form()],
    price: Annotated[str, Form()],
    subtext: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    discount: Annotated[str, Form()] = "0",
) -> ProductIn:
    """Validate the multipart product fields; bad values are a 400, not a 422."""
    try:
        return ProductIn.model_validate(
            {
                "name": name,
                "category": category,
                "subtext": subtext,
                "stock": stock,
                "description": description,
                "price": price,
                "discount": discount or "0",
            }
        )
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise InvalidInput(f"Invalid product fields: {fields}.") from e


@router.get("", response_model=DataEnvelope[list[ProductOut]])
def get_products_by_category(
    db: Annotated[Session, Depends(get_db)],
    category: Annotated[str | None, Header()] = None,
) -> DataEnvelope[list[ProductOut]]:
    """Public: every product in the category named by the `category` header."""
    products = catalog.list_by_category(db, category)
    return DataEnvelope[list[ProductOut]](
        message="Got products data.",
        data=[ProductOut.model_validate(p) for p in products],
    )


@router.post("", response_model=DataEnvelope[ProductOut])
def add_product(
    _admin: Annotated[User, Depends(require_admin)],
    data: Annotated[ProductIn, Depends(product_form)],
    image: Annotated[UploadFile, File()],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DataEnvelope[ProductOut]:
    """
    Create a product (admin only) from a multipart form with an `image` file.
    Only png, jpg and jpeg images are accepted; anything else is rejected
    before the product is written.
    """
    stored = store_image(image, settings)
    try:
        product = catalog.create_product(db, data, stored.url)
    except Exception:
        discard_image(stored)
        raise
    return DataEnvelope[ProductOut](
        message="Product added.", data=ProductOut.model_validate(product)
    )


@router.put("", response_model=DataEnvelope[ProductOut])
def edit_product(
    _admin: Annotated[User, Depends(require_admin)],
    product_id: Annotated[int, Depends(product_id_header)],
    data: Annotated[ProductIn, Depends(product_form)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    image: Annotated[UploadFile | None, File()] = None,
) -> DataEnvelope[ProductOut]:
    """Update the product named by the `_id` header; the image is optional."""
    catalog.get_product(db, product_id)
    stored = store_image(image, settings) if image is not None and image.filename else None
    try:
        product = catalog.update_product(db, product_id, data, stored.url if stored else None)
    except Exception:
        discard_image(stored)
        raise
    return DataEnvelope[ProductOut](
        message="Updated the product.", data=ProductOut.model_validate(product)
    )


@router.delete("", response_model=Envelope)
def remove_product(
    _admin: Annotated[User, Depends(require_admin)],
    product_id: Annotated[int, Depends(product_id_header)],
    db: Annotated[Session, Depends(get_db)],
) -> Envelope:
    catalog.delete_product(db, product_id)
    return Envelope(message="Product deleted.")


@router.get("/all", response_model=ProductPage)
def get_all_products(
    _admin: Annotated[User, Depends(require_admin)],
    params: Annotated[PageParams, Depends(page_params)],
    db: Annotated[Session, Depends(get_db)],
) -> ProductPage:
    """
    Admin catalog, 15 per page, newest first.

    `search` matches name, description and category and wins over `filter`
    (Stock out, In stock, Discounted).
    """
    products, count = catalog.list_products(db, params)
    return ProductPage(
        message="Got all products",
        data=[ProductOut.model_validate(p) for p in products],
        product_count=count,
    )


@router.get("/single", response_model=DataEnvelope[ProductOut])
def get_single_product(
    _admin: Annotated[User, Depends(require_admin)],
    product_id: Annotated[int, Depends(product_id_header)],
    db: Annotated[Session, Depends(get_db)],
) -> DataEnvelope[ProductOut]:
    product = catalog.get_product(db, product_id)
    return DataEnvelope[ProductOut](
        message="Got single product", data=ProductOut.model_validate(product)
    )
