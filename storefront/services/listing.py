"""
Product listing: turns raw query-string parameters into a bounded, sorted,
filtered page of active products plus pagination metadata.
"""
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from storefront.schemas.product import Pagination, Product, ProductListData, ProductListResponse

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12
MAX_LIMIT = 100


class SortField(str, Enum):
    """Sortable product fields, keyed by their wire name."""

    CREATED_AT = "createdAt"
    PRICE = "price"
    NAME = "name"
    STOCK = "stock"

    @property
    def attribute(self) -> str:
        return "created_at" if self is SortField.CREATED_AT else self.value

    @classmethod
    def parse(cls, raw: str | None) -> "SortField":
        if raw:
            raw = raw.strip()
            for sort_field in cls:
                if raw in (sort_field.value, sort_field.attribute):
                    return sort_field
        return cls.CREATED_AT


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: str | None) -> "SortDirection":
        if raw and raw.strip().lower() == "asc":
            return cls.ASC
        return cls.DESC


@dataclass(frozen=True)
class ProductFilter:
    """Filter criteria; every supplied field narrows the result (logical AND)."""

    category_id: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    active_only: bool = True


@dataclass(frozen=True)
class ListingQuery:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    filter: ProductFilter = field(default_factory=ProductFilter)
    sort_by: SortField = SortField.CREATED_AT
    order: SortDirection = SortDirection.DESC

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class ProductStore(Protocol):
    """Read capability over the product collection used by the listing."""

    def find(
        self,
        product_filter: ProductFilter,
        sort_by: SortField,
        order: SortDirection,
        skip: int,
        limit: int,
    ) -> Sequence[Any]:
        ...

    def count(self, product_filter: ProductFilter) -> int:
        ...


class ListingFetchError(Exception):
    """The product store failed while serving a listing."""


def _positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    raw = raw.strip()
    # ASCII digits only
    if not (raw.isascii() and raw.isdigit()):
        return default
    value = int(raw)
    return value if value >= 1 else default


def _price(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _text(raw: str | None) -> str | None:
    if raw is None:
        return None
    return raw.strip() or None


def parse_listing_query(
    params: Mapping[str, str],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> ListingQuery:
    """
    Build a ListingQuery from flat query-string parameters.

    Malformed values never raise: paging falls back to its defaults, bad
    price bounds are dropped, and unknown keys are ignored.
    """
    limit = min(_positive_int(params.get("limit"), default_limit), max_limit)
    product_filter = ProductFilter(
        category_id=_text(params.get("category")),
        min_price=_price(params.get("minPrice")),
        max_price=_price(params.get("maxPrice")),
        search=_text(params.get("search")),
    )
    return ListingQuery(
        page=_positive_int(params.get("page"), DEFAULT_PAGE),
        limit=limit,
        filter=product_filter,
        sort_by=SortField.parse(params.get("sortBy")),
        order=SortDirection.parse(params.get("order")),
    )


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_products=total,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def fetch_listing(query: ListingQuery, store: ProductStore) -> ProductListResponse:
    """
    Fetch one page window and the total match count from the store.

    The count and the page are two independent reads; a concurrent write
    between them can make the total briefly disagree with the page. A page
    window starting at or past the total is not fetched at all.

    Raises:
        ListingFetchError: if a read fails or a row cannot be converted.
            Nothing is retried.
    """
    try:
        total = store.count(query.filter)
        if query.skip >= total:
            rows = []
        else:
            rows = store.find(query.filter, query.sort_by, query.order, query.skip, query.limit)
        products = [Product.model_validate(row) for row in rows]
    except Exception as e:
        logger.error(f"Product listing fetch failed: {e}")
        raise ListingFetchError("Failed to fetch products") from e

    logger.info(f"Listing page={query.page} limit={query.limit}: {len(products)} of {total} products")
    return ProductListResponse(
        count=len(products),
        data=ProductListData(
            products=products,
            pagination=build_pagination(query.page, query.limit, total),
        ),
    )
