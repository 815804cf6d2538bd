"""Shared query/header parameters for list and single-resource routes."""

from typing import Annotated

from fastapi import Header, Query

from storefront.core.errors import InvalidInput
from storefront.services.pagination import PageParams


def page_params(
    page: Annotated[int, Query(description="1-based page number")] = 1,
    search: Annotated[str | None, Query(max_length=255)] = None,
    filter: Annotated[str | None, Query(max_length=64)] = None,
) -> PageParams:
    """page is range-checked by the query builder, not here."""
    return PageParams(page=page, search=search, filter=filter)


def product_id_header(
    product_id: Annotated[
        int | None, Header(alias="_id", convert_underscores=False)
    ] = None,
) -> int:
    if product_id is None:
        raise InvalidInput("_id header is required.")
    return product_id


def order_id_header(
    order_id: Annotated[int | None, Header(alias="id")] = None,
) -> int:
    if order_id is None:
        raise InvalidInput("id header is required.")
    return order_id
