import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.category import Category as CategoryModel
from storefront.schemas.category import Category, CategoryCreate, CategoryListResponse, CategoryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=CategoryListResponse)
def list_categories(
    db: Annotated[Session, Depends(get_db)]
):
    """List all categories by name."""
    categories = db.scalars(select(CategoryModel).order_by(CategoryModel.name)).all()
    return CategoryListResponse(
        count=len(categories),
        data=[Category.model_validate(c) for c in categories],
    )


@router.post("/", response_model=CategoryResponse, status_code=201)
def create_category(
    category: CategoryCreate,
    db: Annotated[Session, Depends(get_db)]
):
    """Create a new category."""
    name = category.name.strip()
    existing = db.scalar(select(CategoryModel).where(func.lower(CategoryModel.name) == name.lower()))
    if existing:
        raise HTTPException(status_code=400, detail="Category with this name already exists")

    db_category = CategoryModel(name=name, description=category.description)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    logger.info(f"Created category {db_category.id} ({name})")

    return CategoryResponse(data=Category.model_validate(db_category))


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    db: Annotated[Session, Depends(get_db)]
):
    """Get a category by ID."""
    category = db.get(CategoryModel, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryResponse(data=Category.model_validate(category))
