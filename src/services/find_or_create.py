"""
Insert-or-fetch primitive for rows guarded by a unique constraint.

Concurrent requests may race to create the same row (same URL, same tag
name). The unique constraint is the authority: the insert runs inside a
SAVEPOINT, and if it loses the race only the savepoint is rolled back and the
winning row is re-selected. The outcome is returned as a tagged result rather
than signalled through exceptions.
"""
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


@dataclass(frozen=True)
class Created(Generic[RowT]):
    """The row did not exist and was inserted by this call."""

    row: RowT


@dataclass(frozen=True)
class AlreadyExists(Generic[RowT]):
    """The row already existed (possibly inserted concurrently)."""

    row: RowT


FindOrCreateResult = Created[RowT] | AlreadyExists[RowT]


async def insert_or_fetch(
    db: AsyncSession,
    row: RowT,
    lookup: Callable[[], Awaitable[RowT | None]],
) -> FindOrCreateResult[RowT]:
    """
    Insert `row`; on a unique violation, return the existing row instead.

    Args:
        db: Database session (an outer transaction may already be open).
        row: New ORM instance to insert.
        lookup: Re-selects the conflicting row by its natural key.

    Returns:
        Created(row) or AlreadyExists(existing).

    Raises:
        IntegrityError: If the violation was not a duplicate of a row that
            `lookup` can find (e.g. a foreign key violation).
    """
    try:
        async with db.begin_nested():
            db.add(row)
            await db.flush()
    except IntegrityError:
        existing = await lookup()
        if existing is None:
            raise
        logger.debug("Insert lost a race; using existing %s", type(existing).__name__)
        return AlreadyExists(existing)
    return Created(row)


def unwrap(result: FindOrCreateResult[RowT]) -> RowT:
    """Return the row regardless of which branch produced it."""
    match result:
        case Created(row=row) | AlreadyExists(row=row):
            return row
