"""
Ownership scoping for user-owned rows.

Every read or mutation of a bookmark, category, or tag goes through these
helpers so that rows owned by another user behave exactly like rows that do
not exist.
"""
from collections.abc import Sequence
from typing import TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.interfaces import ORMOption

from models.bookmark import Bookmark
from services.exceptions import NotFoundError

ModelT = TypeVar("ModelT")


def owned_by(
    model: type[ModelT],
    entity_id: UUID,
    owner_id: UUID,
    include_deleted: bool = False,
) -> list[ColumnElement[bool]]:
    """
    Build the WHERE clauses that scope `model` to one id and one owner.

    Soft-deleted bookmarks are excluded unless include_deleted is True.
    """
    clauses = [model.id == entity_id, model.user_id == owner_id]
    if model is Bookmark and not include_deleted:
        clauses.append(Bookmark.deleted_at.is_(None))
    return clauses


async def get_owned(
    db: AsyncSession,
    model: type[ModelT],
    entity_id: UUID,
    owner_id: UUID,
    options: Sequence[ORMOption] = (),
    include_deleted: bool = False,
) -> ModelT | None:
    """
    Fetch a row by id if and only if it belongs to owner_id.

    Returns:
        The row, or None when it is absent, foreign, or (bookmarks) soft-deleted.
    """
    query = (
        select(model)
        .options(*options)
        .where(*owned_by(model, entity_id, owner_id, include_deleted))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def require_owned(
    db: AsyncSession,
    model: type[ModelT],
    entity_id: UUID,
    owner_id: UUID,
    entity_name: str,
    options: Sequence[ORMOption] = (),
    include_deleted: bool = False,
) -> ModelT:
    """
    Like get_owned, but raise NotFoundError instead of returning None.

    Raises:
        NotFoundError: For absent, foreign, and soft-deleted rows alike.
    """
    entity = await get_owned(
        db, model, entity_id, owner_id, options=options, include_deleted=include_deleted,
    )
    if entity is None:
        raise NotFoundError(entity_name)
    return entity
