"""
Shared fixtures.

The app runs against an in-memory SQLite database with the listing cache
disabled; cache behaviour is tested with a mocked Redis client.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["REDIS_URL"] = ""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from storefront.database import Base, SessionLocal, engine
from storefront.main import app
from storefront.models.category import Category as CategoryModel
from storefront.models.product import Product as ProductModel
from storefront.services.listing import ProductFilter, SortDirection, SortField

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@dataclass
class FakeProduct:
    id: str
    name: str
    price: float
    category_id: str = "cat-1"
    description: str = ""
    stock: int = 1
    is_active: bool = True
    created_at: datetime = BASE_TIME
    category: None = None


class InMemoryProductStore:
    """ProductStore over a plain list, used in place of the database."""

    def __init__(self, products: list[FakeProduct]):
        self.products = list(products)

    def _matches(self, product: FakeProduct, product_filter: ProductFilter) -> bool:
        if product_filter.active_only and not product.is_active:
            return False
        if product_filter.category_id is not None and product.category_id != product_filter.category_id:
            return False
        if product_filter.min_price is not None and product.price < product_filter.min_price:
            return False
        if product_filter.max_price is not None and product.price > product_filter.max_price:
            return False
        if product_filter.search:
            term = product_filter.search.casefold()
            if term not in product.name.casefold() and term not in product.description.casefold():
                return False
        return True

    def find(self, product_filter, sort_by: SortField, order: SortDirection, skip: int, limit: int):
        matching = sorted(
            (p for p in self.products if self._matches(p, product_filter)),
            key=lambda p: p.id,
        )
        matching.sort(key=lambda p: getattr(p, sort_by.attribute), reverse=order is SortDirection.DESC)
        return matching[skip:skip + limit]

    def count(self, product_filter) -> int:
        return sum(1 for p in self.products if self._matches(p, product_filter))


class FailingProductStore:
    def find(self, *args, **kwargs):
        raise ConnectionError("database unavailable")

    def count(self, *args, **kwargs):
        raise ConnectionError("database unavailable")


def make_fake_products(count: int, **overrides) -> list[FakeProduct]:
    return [
        FakeProduct(
            id=f"p{i:03d}",
            name=f"Product {i}",
            price=float(10 * (i + 1)),
            created_at=BASE_TIME + timedelta(minutes=i),
            **overrides,
        )
        for i in range(count)
    ]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def category(db) -> CategoryModel:
    return make_category(db, "Electronics")


def make_category(db, name: str) -> CategoryModel:
    category = CategoryModel(name=name, description=f"{name} products")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def make_product(db, category: CategoryModel, index: int = 0, **fields) -> ProductModel:
    values = {
        "name": f"Product {index}",
        "description": "",
        "price": float(10 * (index + 1)),
        "stock": 5,
        "is_active": True,
        "created_at": BASE_TIME + timedelta(minutes=index),
    }
    values.update(fields)
    product = ProductModel(category_id=category.id, **values)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product
