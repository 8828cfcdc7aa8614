"""FastAPI dependencies for injection."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import get_current_user
from core.config import get_settings
from db.session import get_async_session
from services.bookmark_service import BookmarkService
from services.category_service import CategoryService
from services.tag_service import TagService
from services.user_service import UserService


def get_bookmark_service(db: AsyncSession = Depends(get_async_session)) -> BookmarkService:
    """Bookmark service bound to the request session."""
    return BookmarkService(db)


def get_category_service(db: AsyncSession = Depends(get_async_session)) -> CategoryService:
    """Category service bound to the request session."""
    return CategoryService(db)


def get_tag_service(db: AsyncSession = Depends(get_async_session)) -> TagService:
    """Tag service bound to the request session."""
    return TagService(db)


def get_user_service(db: AsyncSession = Depends(get_async_session)) -> UserService:
    """User service bound to the request session."""
    return UserService(db)


__all__ = [
    "get_async_session",
    "get_bookmark_service",
    "get_category_service",
    "get_current_user",
    "get_settings",
    "get_tag_service",
    "get_user_service",
]
