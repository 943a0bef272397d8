import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.database import get_db
from storefront.models.category import Category as CategoryModel
from storefront.models.product import Product as ProductModel
from storefront.schemas.product import (
    Product,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from storefront.services.listing import ListingFetchError, ProductStore, fetch_listing, parse_listing_query
from storefront.services.listing_cache import (
    cache_listing,
    get_cached_listing,
    get_redis_client,
    invalidate_listing_cache,
)
from storefront.services.product_store import SqlProductStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


def get_product_store(db: Annotated[Session, Depends(get_db)]) -> ProductStore:
    """Dependency providing the store the listing reads from."""
    return SqlProductStore(db)


def _get_product_or_404(db: Session, product_id: str) -> ProductModel:
    product = db.get(ProductModel, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _ensure_category_exists(db: Session, category_id: str) -> None:
    if db.get(CategoryModel, category_id) is None:
        raise HTTPException(status_code=400, detail="Category not found")


@router.get("/", response_model=ProductListResponse)
def list_products(
    request: Request,
    store: Annotated[ProductStore, Depends(get_product_store)],
):
    """
    Get a page of active products.

    Query parameters (all optional, all strings): page, limit, category,
    minPrice, maxPrice, search, sortBy, order. Malformed values fall back
    to defaults instead of being rejected.
    """
    query = parse_listing_query(
        request.query_params,
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
    )
    logger.info(f"Listing query: {query}")

    redis_client = get_redis_client()
    try:
        if redis_client:
            cached = get_cached_listing(redis_client, query)
            if cached is not None:
                return cached

        try:
            response = fetch_listing(query, store)
        except ListingFetchError as e:
            raise HTTPException(status_code=500, detail=str(e))

        if redis_client:
            cache_listing(redis_client, query, response)
        return response
    finally:
        if redis_client:
            try:
                redis_client.close()
            except Exception as e:
                logger.warning(f"Failed to close redis connection: {e}")


@router.post("/", response_model=ProductResponse, status_code=201)
def create_product(
    product: ProductCreate,
    db: Annotated[Session, Depends(get_db)]
):
    """Create a new product."""
    _ensure_category_exists(db, product.category_id)

    db_product = ProductModel(**product.model_dump(), is_active=True)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    logger.info(f"Created product {db_product.id}")

    invalidate_listing_cache()
    return ProductResponse(data=Product.model_validate(db_product))


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    db: Annotated[Session, Depends(get_db)]
):
    """Get a product by ID, including inactive ones."""
    return ProductResponse(data=Product.model_validate(_get_product_or_404(db, product_id)))


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product_update: ProductUpdate,
    db: Annotated[Session, Depends(get_db)]
):
    """Update the supplied fields of a product."""
    db_product = _get_product_or_404(db, product_id)

    changes = product_update.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        _ensure_category_exists(db, changes["category_id"])
    for attribute, value in changes.items():
        setattr(db_product, attribute, value)

    db.commit()
    db.refresh(db_product)
    logger.info(f"Updated product {product_id}: {sorted(changes)}")

    invalidate_listing_cache()
    return ProductResponse(data=Product.model_validate(db_product))


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    db: Annotated[Session, Depends(get_db)]
):
    """Soft-delete a product: it stays in storage but leaves the listing."""
    db_product = _get_product_or_404(db, product_id)
    db_product.is_active = False
    db.commit()
    logger.info(f"Deactivated product {product_id}")

    invalidate_listing_cache()
    return {"success": True, "message": "Product deleted successfully"}

