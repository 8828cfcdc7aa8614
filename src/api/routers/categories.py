"""Category management endpoints."""
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_category_service, get_current_user
from models.user import User
from schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdate,
)
from services.category_service import CategoryService, CategorySortField

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """Create a category. Returns 409 if you already have one with this name."""
    return await service.create(current_user.id, data)


@router.get("/", response_model=CategoryListResponse)
async def list_categories(
    q: str | None = Query(default=None, description="Search in name and description"),
    search: str | None = Query(default=None, description="Alias of q"),
    sort_by: CategorySortField = Query(default="name"),
    sort_order: Literal["asc", "desc"] = Query(default="asc"),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryListResponse:
    """List categories with the number of active bookmarks in each."""
    result = await service.list_categories(
        current_user.id,
        page=page,
        page_size=page_size,
        search=q or search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return CategoryListResponse(items=result.items, pagination=result.pagination)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: UUID,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """Get a single category by ID."""
    return await service.get(current_user.id, category_id)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """
    Update a category.

    Returns 404 if the category doesn't exist.
    Returns 409 if another category already has the new name.
    """
    return await service.update(current_user.id, category_id, data)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: UUID,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> None:
    """Delete a category. Its bookmarks are kept and become uncategorized."""
    await service.delete(current_user.id, category_id)
