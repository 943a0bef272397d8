from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CategoryBase(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None


class CategoryCreate(CategoryBase):
    pass


class CategorySummary(CamelModel):
    id: str
    name: str


class Category(CategoryBase):
    id: str
    created_at: datetime | None = None


class CategoryResponse(CamelModel):
    success: bool = True
    data: Category


class CategoryListResponse(CamelModel):
    success: bool = True
    count: int
    data: list[Category]
