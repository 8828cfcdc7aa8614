"""Bookmark CRUD endpoints."""
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_bookmark_service, get_current_user
from models.user import User
from schemas.bookmark import (
    BookmarkCategorySet,
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkTagsAdd,
    BookmarkUpdate,
)
from services.bookmark_service import BookmarkService, BookmarkSortField

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.post("/", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkResponse:
    """
    Create a new bookmark.

    Bookmarks of the same URL (by any user) share one website metadata record.
    Tags are given by name and created on first use.
    """
    bookmark = await service.create(current_user.id, data)
    return BookmarkResponse.model_validate(bookmark)


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    q: str | None = Query(
        default=None,
        description="Search in personal title, note, page title, URL, and tag names",
    ),
    search: str | None = Query(default=None, description="Alias of q"),
    category_id: UUID | None = Query(default=None),
    is_public: bool | None = Query(default=None),
    tags: list[str] = Query(default=[], description="Filter by tag names"),
    tag_match: Literal["all", "any"] = Query(
        default="all",
        description="Tag matching mode: 'all' (AND) or 'any' (OR)",
    ),
    sort_by: BookmarkSortField = Query(default="created_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkListResponse:
    """
    List the current user's active bookmarks.

    page_size above the server ceiling is clamped rather than rejected.
    """
    result = await service.list_bookmarks(
        current_user.id,
        page=page,
        page_size=page_size,
        search=q or search,
        category_id=category_id,
        is_public=is_public,
        tags=tags or None,
        tag_match=tag_match,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return BookmarkListResponse(
        items=[BookmarkResponse.model_validate(b) for b in result.items],
        pagination=result.pagination,
    )


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await service.get(current_user.id, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkUpdate,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkResponse:
    """
    Update a bookmark.

    Only fields present in the body change. A `tags` list replaces all tags.
    """
    bookmark = await service.update(current_user.id, bookmark_id, data)
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> None:
    """Soft delete a bookmark. Deleting it again returns 404."""
    await service.delete(current_user.id, bookmark_id)


@router.post("/{bookmark_id}/restore", response_model=BookmarkResponse)
async def restore_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkResponse:
    """Restore a soft-deleted bookmark."""
    bookmark = await service.restore(current_user.id, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)


@router.post("/{bookmark_id}/tags", response_model=BookmarkResponse)
async def add_bookmark_tags(
    bookmark_id: UUID,
    data: BookmarkTagsAdd,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkResponse:
    """Attach existing tags by id. Returns 400 if any tag is not yours."""
    bookmark = await service.add_tags(current_user.id, bookmark_id, data.tag_ids)
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}/tags/{tag_id}", response_model=BookmarkResponse)
async def remove_bookmark_tag(
    bookmark_id: UUID,
    tag_id: UUID,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkResponse:
    """Detach one tag from a bookmark."""
    bookmark = await service.remove_tag(current_user.id, bookmark_id, tag_id)
    return BookmarkResponse.model_validate(bookmark)


@router.put("/{bookmark_id}/category", response_model=BookmarkResponse)
async def set_bookmark_category(
    bookmark_id: UUID,
    data: BookmarkCategorySet,
    current_user: User = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkResponse:
    """Move a bookmark to a category (null removes it from any category)."""
    bookmark = await service.set_category(current_user.id, bookmark_id, data.category_id)
    return BookmarkResponse.model_validate(bookmark)
