"""Tests for the insert-or-fetch primitive."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from models.tag import Tag
from models.user import User
from services.find_or_create import AlreadyExists, Created, insert_or_fetch, unwrap


async def find_tag(db_session: AsyncSession, user: User, name: str) -> Tag | None:
    """Look up a tag by owner and name."""
    result = await db_session.execute(
        select(Tag).where(Tag.user_id == user.id, Tag.name == name),
    )
    return result.scalar_one_or_none()


async def test__insert_or_fetch__inserts_new_row(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """With no conflict the row is inserted and returned as Created."""
    row = Tag(user_id=test_user.id, name="fresh")

    result = await insert_or_fetch(
        db_session, row, lambda: find_tag(db_session, test_user, "fresh"),
    )

    assert isinstance(result, Created)
    assert result.row is row
    assert unwrap(result) is row


async def test__insert_or_fetch__unique_violation_returns_existing(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """A unique violation re-selects and returns the existing row."""
    existing = Tag(user_id=test_user.id, name="python")
    db_session.add(existing)
    await db_session.flush()

    result = await insert_or_fetch(
        db_session,
        Tag(user_id=test_user.id, name="python"),
        lambda: find_tag(db_session, test_user, "python"),
    )

    assert isinstance(result, AlreadyExists)
    assert result.row.id == existing.id
    assert unwrap(result).id == existing.id


async def test__insert_or_fetch__outer_transaction_stays_usable(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Only the savepoint is rolled back; earlier and later work survive."""
    db_session.add(Tag(user_id=test_user.id, name="before"))
    await db_session.flush()

    await insert_or_fetch(
        db_session,
        Tag(user_id=test_user.id, name="before"),
        lambda: find_tag(db_session, test_user, "before"),
    )
    db_session.add(Tag(user_id=test_user.id, name="after"))
    await db_session.flush()

    count = await db_session.scalar(
        select(func.count()).select_from(Tag).where(Tag.user_id == test_user.id),
    )
    assert count == 2


async def test__insert_or_fetch__reraises_when_lookup_finds_nothing(
    db_session: AsyncSession,
) -> None:
    """Violations that are not duplicates (e.g. a bad foreign key) propagate."""

    async def lookup() -> Tag | None:
        return None

    with pytest.raises(IntegrityError):
        await insert_or_fetch(db_session, Tag(user_id=uuid7(), name="orphan"), lookup)
