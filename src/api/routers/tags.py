"""Tag management endpoints."""
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_current_user, get_tag_service
from models.user import User
from schemas.tag import (
    TagBookmarksResponse,
    TagCreate,
    TagListResponse,
    TagResponse,
    TagUpdate,
)
from services.tag_service import TagService, TagSortField

router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("/", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreate,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """Create a tag. Returns 409 if you already have one with this name."""
    return await service.create(current_user.id, data)


@router.get("/", response_model=TagListResponse)
async def list_tags(
    q: str | None = Query(default=None, description="Search in tag names"),
    search: str | None = Query(default=None, description="Alias of q"),
    sort_by: TagSortField = Query(default="name"),
    sort_order: Literal["asc", "desc"] = Query(default="asc"),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagListResponse:
    """Get the current user's tags with their active bookmark counts."""
    result = await service.list_tags(
        current_user.id,
        page=page,
        page_size=page_size,
        search=q or search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return TagListResponse(items=result.items, pagination=result.pagination)


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(
    tag_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """Get a single tag by ID."""
    return await service.get(current_user.id, tag_id)


@router.get("/{tag_id}/bookmarks", response_model=TagBookmarksResponse)
async def list_tag_bookmarks(
    tag_id: UUID,
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagBookmarksResponse:
    """Get a tag and the active bookmarks carrying it, newest first."""
    tag, result = await service.list_tag_bookmarks(
        current_user.id, tag_id, page=page, page_size=page_size,
    )
    return TagBookmarksResponse(tag=tag, items=result.items, pagination=result.pagination)


@router.patch("/{tag_id}", response_model=TagResponse)
async def rename_tag(
    tag_id: UUID,
    data: TagUpdate,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """
    Rename a tag.

    All bookmarks using this tag will automatically reflect the new name.

    Returns 404 if the tag doesn't exist.
    Returns 409 if a tag with the new name already exists.
    """
    return await service.update(current_user.id, tag_id, data)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> None:
    """Delete a tag. It is removed from every bookmark that carried it."""
    await service.delete(current_user.id, tag_id)
