from collections.abc import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.models.product import Product as ProductModel
from storefront.services.listing import ProductFilter, SortDirection, SortField


def _like_pattern(term: str) -> str:
    """Substring pattern that matches LIKE wildcards in the term literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlProductStore:
    """ProductStore over the products table."""

    def __init__(self, db: Session):
        self.db = db

    def _where(self, product_filter: ProductFilter) -> list:
        clauses = []
        if product_filter.active_only:
            clauses.append(ProductModel.is_active.is_(True))
        if product_filter.category_id is not None:
            clauses.append(ProductModel.category_id == product_filter.category_id)
        if product_filter.min_price is not None:
            clauses.append(ProductModel.price >= product_filter.min_price)
        if product_filter.max_price is not None:
            clauses.append(ProductModel.price <= product_filter.max_price)
        if product_filter.search:
            pattern = _like_pattern(product_filter.search)
            clauses.append(
                or_(
                    ProductModel.name.ilike(pattern, escape="\\"),
                    ProductModel.description.ilike(pattern, escape="\\"),
                )
            )
        return clauses

    def find(
        self,
        product_filter: ProductFilter,
        sort_by: SortField,
        order: SortDirection,
        skip: int,
        limit: int,
    ) -> Sequence[ProductModel]:
        column = getattr(ProductModel, sort_by.attribute)
        ordering = column.asc() if order is SortDirection.ASC else column.desc()
        stmt = (
            select(ProductModel)
            .where(*self._where(product_filter))
            # id breaks ties so equal sort keys page deterministically
            .order_by(ordering, ProductModel.id.asc())
            .offset(skip)
            .limit(limit)
        )
        return self.db.scalars(stmt).all()

    def count(self, product_filter: ProductFilter) -> int:
        stmt = select(func.count()).select_from(ProductModel).where(*self._where(product_filter))
        return self.db.scalar(stmt) or 0
