"""Tests for tag service layer functionality."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from models.tag import Tag
from models.user import User
from schemas.bookmark import BookmarkCreate
from schemas.tag import TagCreate, TagUpdate
from services.bookmark_service import BookmarkService
from services.exceptions import DuplicateNameError, NotFoundError, ValidationError
from services.tag_service import TagService


@pytest.fixture
def service(db_session: AsyncSession) -> TagService:
    """Tag service bound to the test session."""
    return TagService(db_session)


async def count_tags(db_session: AsyncSession, user: User) -> int:
    """Number of tag rows owned by user."""
    return await db_session.scalar(
        select(func.count()).select_from(Tag).where(Tag.user_id == user.id),
    )


# =============================================================================
# resolve
# =============================================================================


async def test__resolve__creates_missing_tags(
    service: TagService,
    test_user: User,
) -> None:
    """Unknown names are created for the owner."""
    tags = await service.resolve(test_user.id, ["python", "web"])

    assert [t.name for t in tags] == ["python", "web"]
    assert all(t.user_id == test_user.id for t in tags)


async def test__resolve__is_idempotent(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Resolving the same name twice never creates a second row."""
    first = await service.resolve(test_user.id, ["python"])
    second = await service.resolve(test_user.id, ["python"])

    assert first[0].id == second[0].id
    assert await count_tags(db_session, test_user) == 1


async def test__resolve__normalizes_and_dedupes(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Case, surrounding and repeated whitespace collapse to one tag."""
    tags = await service.resolve(
        test_user.id, ["Machine  Learning", " machine learning", "MACHINE LEARNING", ""],
    )

    assert [t.name for t in tags] == ["machine learning"]
    assert await count_tags(db_session, test_user) == 1


async def test__resolve__empty_input_returns_empty(
    service: TagService,
    test_user: User,
) -> None:
    """No names means no tags."""
    assert await service.resolve(test_user.id, []) == []


async def test__resolve__is_scoped_per_owner(
    service: TagService,
    test_user: User,
    other_user: User,
) -> None:
    """Two users get separate rows for the same name."""
    mine = await service.resolve(test_user.id, ["python"])
    theirs = await service.resolve(other_user.id, ["python"])

    assert mine[0].id != theirs[0].id


async def test__resolve__too_long_name_raises(
    service: TagService,
    test_user: User,
) -> None:
    """Names over the length limit are a validation error."""
    with pytest.raises(ValidationError):
        await service.resolve(test_user.id, ["x" * 51])


async def test__resolve_ids__returns_id_set(
    service: TagService,
    test_user: User,
) -> None:
    """resolve_ids returns one id per distinct name."""
    ids = await service.resolve_ids(test_user.id, ["a", "b", "a"])

    assert len(ids) == 2


async def test__resolve__recovers_from_concurrent_insert(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """A tag inserted between the lookup and the insert is reused."""
    original_execute = db_session.execute
    raced = False

    async def execute_with_race(statement, *args, **kwargs):  # noqa: ANN001, ANN202
        nonlocal raced
        result = await original_execute(statement, *args, **kwargs)
        if not raced:
            # Simulate another request creating the tag right after our lookup
            raced = True
            db_session.add(Tag(user_id=test_user.id, name="racy"))
            await db_session.flush()
        return result

    db_session.execute = execute_with_race
    try:
        tags = await service.resolve(test_user.id, ["racy"])
    finally:
        db_session.execute = original_execute

    assert [t.name for t in tags] == ["racy"]
    assert await count_tags(db_session, test_user) == 1


# =============================================================================
# create / get
# =============================================================================


async def test__create__returns_tag_with_zero_count(
    service: TagService,
    test_user: User,
) -> None:
    """A new tag has no bookmarks."""
    tag = await service.create(test_user.id, TagCreate(name="Python"))

    assert tag.name == "python"
    assert tag.bookmark_count == 0
    assert tag.created_at is not None


async def test__create__duplicate_name_raises(
    service: TagService,
    test_user: User,
) -> None:
    """The same name (after normalization) cannot be created twice."""
    await service.create(test_user.id, TagCreate(name="python"))

    with pytest.raises(DuplicateNameError) as exc_info:
        await service.create(test_user.id, TagCreate(name="PYTHON"))

    assert exc_info.value.name == "python"


async def test__create__same_name_for_other_user_succeeds(
    service: TagService,
    test_user: User,
    other_user: User,
) -> None:
    """Tag names are unique per user, not globally."""
    await service.create(test_user.id, TagCreate(name="python"))

    tag = await service.create(other_user.id, TagCreate(name="python"))

    assert tag.name == "python"


async def test__get__counts_only_active_bookmarks(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Soft-deleted bookmarks are not counted."""
    bookmarks = BookmarkService(db_session)
    kept = await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://a.example.com", tags=["python"]),
    )
    deleted = await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://b.example.com", tags=["python"]),
    )
    await bookmarks.delete(test_user.id, deleted.id)

    tag = await service.get(test_user.id, kept.tags[0].id)

    assert tag.bookmark_count == 1


async def test__get__other_users_tag_is_not_found(
    service: TagService,
    test_user: User,
    other_user: User,
) -> None:
    """Another user's tag is reported as missing."""
    tag = await service.create(test_user.id, TagCreate(name="python"))

    with pytest.raises(NotFoundError):
        await service.get(other_user.id, tag.id)


# =============================================================================
# list_tags
# =============================================================================


async def test__list_tags__sorted_by_name_with_counts(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Default ordering is name ascending; counts come from one grouped query."""
    bookmarks = BookmarkService(db_session)
    await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://a.example.com", tags=["beta", "alpha"]),
    )
    await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://b.example.com", tags=["beta"]),
    )
    await service.create(test_user.id, TagCreate(name="unused"))

    page = await service.list_tags(test_user.id)

    assert [(t.name, t.bookmark_count) for t in page.items] == [
        ("alpha", 1),
        ("beta", 2),
        ("unused", 0),
    ]
    assert page.pagination.total == 3


async def test__list_tags__sort_by_bookmark_count_desc(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Tags can be ordered by usage."""
    bookmarks = BookmarkService(db_session)
    await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://a.example.com", tags=["rare", "common"]),
    )
    await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://b.example.com", tags=["common"]),
    )

    page = await service.list_tags(test_user.id, sort_by="bookmark_count", sort_order="desc")

    assert [t.name for t in page.items] == ["common", "rare"]


async def test__list_tags__search_and_pagination(
    service: TagService,
    test_user: User,
) -> None:
    """Search filters by substring and pagination reflects the filtered total."""
    for name in ["py-one", "py-two", "py-three", "rust"]:
        await service.create(test_user.id, TagCreate(name=name))

    page = await service.list_tags(test_user.id, search="py-", page=1, page_size=2)

    assert len(page.items) == 2
    assert page.pagination.total == 3
    assert page.pagination.total_pages == 2
    assert page.pagination.has_next is True


async def test__list_tags__excludes_other_users(
    service: TagService,
    test_user: User,
    other_user: User,
) -> None:
    """Only the owner's tags are listed."""
    await service.create(other_user.id, TagCreate(name="theirs"))

    page = await service.list_tags(test_user.id)

    assert page.items == []
    assert page.pagination.total_pages == 0


# =============================================================================
# update / delete
# =============================================================================


async def test__update__renames_tag_on_bookmarks(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Renaming a tag is reflected on bookmarks carrying it."""
    bookmarks = BookmarkService(db_session)
    bookmark = await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://example.com", tags=["old"]),
    )

    renamed = await service.update(test_user.id, bookmark.tags[0].id, TagUpdate(name="New"))

    assert renamed.name == "new"
    assert renamed.bookmark_count == 1
    fetched = await bookmarks.get(test_user.id, bookmark.id)
    assert [t.name for t in fetched.tags] == ["new"]


async def test__update__duplicate_name_raises(
    service: TagService,
    test_user: User,
) -> None:
    """Renaming onto another existing tag's name is rejected."""
    await service.create(test_user.id, TagCreate(name="taken"))
    tag = await service.create(test_user.id, TagCreate(name="mine"))

    with pytest.raises(DuplicateNameError):
        await service.update(test_user.id, tag.id, TagUpdate(name="taken"))


async def test__update__same_name_is_allowed(
    service: TagService,
    test_user: User,
) -> None:
    """Renaming a tag to its own name is not a duplicate."""
    tag = await service.create(test_user.id, TagCreate(name="mine"))

    renamed = await service.update(test_user.id, tag.id, TagUpdate(name="MINE"))

    assert renamed.name == "mine"


async def test__update__other_users_tag_is_not_found(
    service: TagService,
    test_user: User,
    other_user: User,
) -> None:
    """Another user cannot rename the tag."""
    tag = await service.create(test_user.id, TagCreate(name="mine"))

    with pytest.raises(NotFoundError):
        await service.update(other_user.id, tag.id, TagUpdate(name="stolen"))


async def test__delete__removes_tag(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Deleted tags are gone."""
    tag = await service.create(test_user.id, TagCreate(name="python"))

    await service.delete(test_user.id, tag.id)

    assert await count_tags(db_session, test_user) == 0
    with pytest.raises(NotFoundError):
        await service.get(test_user.id, tag.id)


async def test__delete__unknown_tag_is_not_found(
    service: TagService,
    test_user: User,
) -> None:
    """Deleting a tag that does not exist reports NotFound."""
    with pytest.raises(NotFoundError):
        await service.delete(test_user.id, uuid7())


# =============================================================================
# list_tag_bookmarks
# =============================================================================


async def test__list_tag_bookmarks__lists_active_bookmarks_with_title_fallback(
    db_session: AsyncSession,
    service: TagService,
    test_user: User,
) -> None:
    """Titles fall back to "Untitled" and deleted bookmarks are skipped."""
    bookmarks = BookmarkService(db_session)
    titled = await bookmarks.create(
        test_user.id,
        BookmarkCreate(url="https://a.example.com", personal_title="Mine", tags=["t"]),
    )
    untitled = await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://b.example.com", tags=["t"]),
    )
    deleted = await bookmarks.create(
        test_user.id, BookmarkCreate(url="https://c.example.com", tags=["t"]),
    )
    await bookmarks.delete(test_user.id, deleted.id)

    tag, page = await service.list_tag_bookmarks(test_user.id, titled.tags[0].id)

    assert tag.name == "t"
    assert tag.bookmark_count == 2
    assert [(i.id, i.title) for i in page.items] == [
        (untitled.id, "Untitled"),
        (titled.id, "Mine"),
    ]
    assert page.items[1].url == "https://a.example.com"
    assert page.pagination.total == 2


async def test__list_tag_bookmarks__other_users_tag_is_not_found(
    service: TagService,
    test_user: User,
    other_user: User,
) -> None:
    """Another user's tag cannot be browsed."""
    tag = await service.create(test_user.id, TagCreate(name="private"))

    with pytest.raises(NotFoundError):
        await service.list_tag_bookmarks(other_user.id, tag.id)
