"""
Security test fixtures.

test_user (served by `client`) owns a categorized, tagged bookmark;
other_user (served by `other_client`) owns one plain bookmark.
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.category import Category
from models.user import User
from schemas.bookmark import BookmarkCreate
from schemas.category import CategoryCreate
from services.bookmark_service import BookmarkService
from services.category_service import CategoryService


@pytest.fixture
async def owner_category(db_session: AsyncSession, test_user: User) -> Category:
    """A category belonging to test_user."""
    created = await CategoryService(db_session).create(
        test_user.id, CategoryCreate(name="Private"),
    )
    return await CategoryService(db_session).get_category(test_user.id, created.id)


@pytest.fixture
async def owner_bookmark(
    db_session: AsyncSession,
    test_user: User,
    owner_category: Category,
) -> Bookmark:
    """A bookmark belonging to test_user, tagged "secret"."""
    return await BookmarkService(db_session).create(
        test_user.id,
        BookmarkCreate(
            url="https://owner.example.com/private",
            personal_title="Owner's private bookmark",
            category_id=owner_category.id,
            tags=["secret"],
        ),
    )


@pytest.fixture
async def intruder_bookmark(db_session: AsyncSession, other_user: User) -> Bookmark:
    """A bookmark belonging to other_user."""
    return await BookmarkService(db_session).create(
        other_user.id,
        BookmarkCreate(url="https://intruder.example.com/"),
    )
