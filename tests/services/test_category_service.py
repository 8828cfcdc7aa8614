"""Tests for category service layer functionality."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.bookmark import BookmarkCreate
from schemas.category import CategoryCreate, CategoryUpdate
from services.bookmark_service import BookmarkService
from services.category_service import CategoryService
from services.exceptions import DuplicateNameError, NotFoundError


@pytest.fixture
def service(db_session: AsyncSession) -> CategoryService:
    """Category service bound to the test session."""
    return CategoryService(db_session)


# =============================================================================
# create
# =============================================================================


async def test__create__returns_category(service: CategoryService, test_user: User) -> None:
    """Name case is preserved and color is upper-cased."""
    category = await service.create(
        test_user.id,
        CategoryCreate(name="  Work  ", description="Job stuff", color="#a1b2c3"),
    )

    assert category.name == "Work"
    assert category.description == "Job stuff"
    assert category.color == "#A1B2C3"
    assert category.bookmark_count == 0


async def test__create__duplicate_name_raises(service: CategoryService, test_user: User) -> None:
    """Creating "Work" twice for the same user fails."""
    await service.create(test_user.id, CategoryCreate(name="Work"))

    with pytest.raises(DuplicateNameError) as exc_info:
        await service.create(test_user.id, CategoryCreate(name="Work"))

    assert str(exc_info.value) == "Category 'Work' already exists"


async def test__create__same_name_for_other_user_succeeds(
    service: CategoryService,
    test_user: User,
    other_user: User,
) -> None:
    """Another user may have their own "Work" category."""
    await service.create(test_user.id, CategoryCreate(name="Work"))

    category = await service.create(other_user.id, CategoryCreate(name="Work"))

    assert category.name == "Work"


# =============================================================================
# get / list_categories
# =============================================================================


async def test__get__counts_only_active_bookmarks(
    db_session: AsyncSession,
    service: CategoryService,
    test_user: User,
) -> None:
    """bookmark_count ignores soft-deleted bookmarks."""
    category = await service.create(test_user.id, CategoryCreate(name="Work"))
    bookmarks = BookmarkService(db_session)
    await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://a.example.com", category_id=category.id),
    )
    deleted = await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://b.example.com", category_id=category.id),
    )
    await bookmarks.delete(test_user.id, deleted.id)

    fetched = await service.get(test_user.id, category.id)

    assert fetched.bookmark_count == 1


async def test__get__other_users_category_is_not_found(
    service: CategoryService,
    test_user: User,
    other_user: User,
) -> None:
    """Another user's category is reported as missing."""
    category = await service.create(test_user.id, CategoryCreate(name="Work"))

    with pytest.raises(NotFoundError) as exc_info:
        await service.get(other_user.id, category.id)

    assert str(exc_info.value) == "Category not found"


async def test__list_categories__name_order_and_counts(
    db_session: AsyncSession,
    service: CategoryService,
    test_user: User,
) -> None:
    """Categories are listed by name with their counts."""
    work = await service.create(test_user.id, CategoryCreate(name="Work"))
    await service.create(test_user.id, CategoryCreate(name="Home"))
    await BookmarkService(db_session).create(
        test_user.id, BookmarkCreate(url="https://example.com", category_id=work.id),
    )

    page = await service.list_categories(test_user.id)

    assert [(c.name, c.bookmark_count) for c in page.items] == [("Home", 0), ("Work", 1)]
    assert page.pagination.total == 2
    assert page.pagination.total_pages == 1


async def test__list_categories__search_matches_name_or_description(
    service: CategoryService,
    test_user: User,
) -> None:
    """Search is a substring match on name or description."""
    await service.create(test_user.id, CategoryCreate(name="Reading", description="books"))
    await service.create(test_user.id, CategoryCreate(name="Bookshelf"))
    await service.create(test_user.id, CategoryCreate(name="Music"))

    page = await service.list_categories(test_user.id, search="book")

    assert {c.name for c in page.items} == {"Reading", "Bookshelf"}


# =============================================================================
# update / delete
# =============================================================================


async def test__update__partial_fields(service: CategoryService, test_user: User) -> None:
    """Only provided fields change; explicit null clears description."""
    category = await service.create(
        test_user.id, CategoryCreate(name="Work", description="desc", color="#000000"),
    )

    updated = await service.update(
        test_user.id,
        category.id,
        CategoryUpdate.model_validate({"description": None, "color": "#ffffff"}),
    )

    assert updated.name == "Work"
    assert updated.description is None
    assert updated.color == "#FFFFFF"
    assert updated.updated_at > category.updated_at


async def test__update__duplicate_name_raises(service: CategoryService, test_user: User) -> None:
    """Renaming onto another category's name is rejected."""
    await service.create(test_user.id, CategoryCreate(name="Work"))
    home = await service.create(test_user.id, CategoryCreate(name="Home"))

    with pytest.raises(DuplicateNameError):
        await service.update(test_user.id, home.id, CategoryUpdate(name="Work"))


async def test__update__keeping_own_name_is_allowed(
    service: CategoryService,
    test_user: User,
) -> None:
    """Sending the current name back is not a duplicate."""
    work = await service.create(test_user.id, CategoryCreate(name="Work"))

    updated = await service.update(
        test_user.id, work.id, CategoryUpdate(name="Work", description="still work"),
    )

    assert updated.description == "still work"


async def test__update__other_users_category_is_not_found(
    service: CategoryService,
    test_user: User,
    other_user: User,
) -> None:
    """Another user cannot update the category."""
    work = await service.create(test_user.id, CategoryCreate(name="Work"))

    with pytest.raises(NotFoundError):
        await service.update(other_user.id, work.id, CategoryUpdate(name="Mine now"))


async def test__delete__keeps_bookmarks_uncategorized(
    db_session: AsyncSession,
    service: CategoryService,
    test_user: User,
) -> None:
    """Deleting a category nulls the reference on its bookmarks."""
    work = await service.create(test_user.id, CategoryCreate(name="Work"))
    bookmarks = BookmarkService(db_session)
    bookmark = await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://example.com", category_id=work.id),
    )

    await service.delete(test_user.id, work.id)

    fetched = await bookmarks.get(test_user.id, bookmark.id)
    assert fetched.category is None
    with pytest.raises(NotFoundError):
        await service.get(test_user.id, work.id)


async def test__delete__other_users_category_is_not_found(
    service: CategoryService,
    test_user: User,
    other_user: User,
) -> None:
    """Another user cannot delete the category."""
    work = await service.create(test_user.id, CategoryCreate(name="Work"))

    with pytest.raises(NotFoundError):
        await service.delete(other_user.id, work.id)
