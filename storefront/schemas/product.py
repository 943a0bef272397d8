from datetime import datetime

from pydantic import Field

from storefront.schemas.category import CamelModel, CategorySummary


class ProductBase(CamelModel):
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    category_id: str
    stock: int = Field(default=0, ge=0)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    category_id: str | None = None
    stock: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class Product(ProductBase):
    id: str
    is_active: bool
    created_at: datetime | None = None
    category: CategorySummary | None = None


class ProductResponse(CamelModel):
    success: bool = True
    data: Product


class Pagination(CamelModel):
    """Position of one page window within the full listing."""
    current_page: int
    total_pages: int
    total_products: int
    has_next_page: bool
    has_prev_page: bool


class ProductListData(CamelModel):
    products: list[Product]
    pagination: Pagination


class ProductListResponse(CamelModel):
    """Response model for the paginated product listing."""
    success: bool = True
    count: int
    data: ProductListData
