"""
Paginated query construction shared by the admin list endpoints.

Turns raw page/search/filter parameters into one criterion, an ordering and a
skip/limit window. The same criterion is used for the page slice and the total
count so the two always describe the same result set.

Precedence: a non-empty search wins over a named filter; a filter token that
is not in the filter map is ignored (all records match).
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from storefront.core.errors import InvalidInput

# Records per page for every listing endpoint.
PAGE_SIZE = 15

# Largest skip a signed 64-bit OFFSET can hold.
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class PageParams:
    """Raw listing parameters as received in the query string."""

    page: int = 1
    search: str | None = None
    filter: str | None = None


@dataclass(frozen=True)
class PageQuery:
    """
    criterion is None when every record matches. order_by is empty while a
    search is active (natural order of the match).
    """

    criterion: ColumnElement[bool] | None
    order_by: tuple[Any, ...]
    skip: int
    limit: int
    search_active: bool = False


def normalize_search(search: str | None) -> str | None:
    """Trim search text; empty or whitespace-only text counts as no search."""
    if search is None:
        return None
    s = search.strip()
    return s or None


def page_window(page: int, limit: int = PAGE_SIZE) -> tuple[int, int]:
    """Return (skip, limit) for a 1-based page number."""
    if isinstance(page, bool) or not isinstance(page, int):
        raise InvalidInput("page must be an integer")
    if page < 1:
        raise InvalidInput("page must be 1 or greater")
    skip = (page - 1) * limit
    if skip > MAX_OFFSET:
        raise InvalidInput("page is too large")
    return skip, limit


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_criterion(
    search: str, columns: Sequence[Any]
) -> ColumnElement[bool]:
    """Case-insensitive substring match of search over any of columns."""
    if not columns:
        raise ValueError("search_criterion needs at least one column")
    pattern = f"%{_escape_like(search)}%"
    return or_(*(col.ilike(pattern, escape="\\") for col in columns))


def build_page_query(
    params: PageParams,
    filter_map: Mapping[str, ColumnElement[bool]],
    search_columns: Sequence[Any],
    newest_first: Any,
    scope: ColumnElement[bool] | None = None,
) -> PageQuery:
    """
    Build the (criterion, order, skip, limit) for one listing request.

    - search (non-empty after trimming) -> substring match over search_columns,
      no explicit ordering; any filter on the same request is ignored.
    - else a filter token found in filter_map -> that criterion.
    - else unconstrained.
    Without a search the rows come back newest_first. scope, when given, is
    always ANDed in (e.g. "only my orders").
    """
    skip, limit = page_window(params.page)
    search = normalize_search(params.search)

    criterion: ColumnElement[bool] | None
    if search is not None:
        criterion = search_criterion(search, search_columns)
    else:
        token = (params.filter or "").strip()
        criterion = filter_map.get(token) if token else None

    if scope is not None:
        criterion = scope if criterion is None else and_(scope, criterion)

    order_by: tuple[Any, ...] = () if search is not None else (newest_first,)
    return PageQuery(
        criterion=criterion,
        order_by=order_by,
        skip=skip,
        limit=limit,
        search_active=search is not None,
    )


def fetch_page(session: Session, model: type, query: PageQuery) -> tuple[list[Any], int]:
    """
    Run the count and the page slice for query against model.

    The two statements are not in one snapshot; under concurrent writes the
    count may be slightly off from the page contents.
    """
    base = session.query(model)
    if query.criterion is not None:
        base = base.filter(query.criterion)
    count = base.order_by(None).count()
    rows = base
    if query.order_by:
        rows = rows.order_by(*query.order_by)
    items = rows.offset(query.skip).limit(query.limit).all()
    return items, count
