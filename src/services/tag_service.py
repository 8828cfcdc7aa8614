"""Service layer for tag operations."""
import logging
from collections.abc import Iterable
from typing import Literal
from uuid import UUID

from sqlalchemy import and_, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from models.bookmark import Bookmark
from models.tag import Tag, bookmark_tags
from models.website_metadata import WebsiteMetadata
from schemas.tag import TagCreate, TaggedBookmarkItem, TagResponse, TagUpdate
from schemas.validators import validate_and_normalize_tag, validate_and_normalize_tags
from services.exceptions import DuplicateNameError, NotFoundError
from services.find_or_create import AlreadyExists, insert_or_fetch, unwrap
from services.ownership import require_owned
from services.pagination import Page, build_page, clamp_page_params
from services.utils import contains_pattern, revalidate

logger = logging.getLogger(__name__)

TagSortField = Literal["name", "created_at", "updated_at", "bookmark_count"]


class TagService:
    """
    Tag CRUD plus the tag resolver used by bookmark create/update.

    Tags live in a per-user namespace: two users may both own a tag named
    "python" without conflict.
    """

    entity_name = "Tag"

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # --- Resolver ---

    async def resolve(self, owner_id: UUID, names: Iterable[str]) -> list[Tag]:
        """
        Map free-text tag names to the owner's Tag rows, creating missing ones.

        Names are normalized and de-duplicated first, so repeated names in the
        input never produce duplicate tags. Concurrent creation of the same
        name is settled by the (user_id, name) unique constraint.

        Args:
            owner_id: User ID whose namespace the names belong to.
            names: Tag names as typed by the user.

        Returns:
            One Tag per distinct normalized name, in first-occurrence order.

        Raises:
            ValidationError: If a name is too long.
        """
        normalized = revalidate(validate_and_normalize_tags, list(names))
        if not normalized:
            return []

        # Fetch existing tags
        result = await self.db.execute(
            select(Tag).where(
                Tag.user_id == owner_id,
                Tag.name.in_(normalized),
            ),
        )
        existing_tags = {tag.name: tag for tag in result.scalars()}

        # Create missing tags
        tags = []
        for name in normalized:
            tag = existing_tags.get(name)
            if tag is None:
                created = await insert_or_fetch(
                    self.db,
                    Tag(user_id=owner_id, name=name),
                    lambda name=name: self._get_by_name(owner_id, name),
                )
                tag = unwrap(created)
            tags.append(tag)
        return tags

    async def resolve_ids(self, owner_id: UUID, names: Iterable[str]) -> set[UUID]:
        """Resolve names and return just the tag ids."""
        return {tag.id for tag in await self.resolve(owner_id, names)}

    # --- CRUD ---

    async def create(self, owner_id: UUID, data: TagCreate) -> TagResponse:
        """
        Create a tag.

        Raises:
            DuplicateNameError: If the owner already has a tag with this name.
        """
        name = revalidate(validate_and_normalize_tag, data.name)
        if await self._get_by_name(owner_id, name) is not None:
            raise DuplicateNameError(self.entity_name, name)

        result = await insert_or_fetch(
            self.db,
            Tag(user_id=owner_id, name=name),
            lambda: self._get_by_name(owner_id, name),
        )
        # Lost a race with a concurrent create of the same name
        if isinstance(result, AlreadyExists):
            raise DuplicateNameError(self.entity_name, name)

        tag = result.row
        await self.db.refresh(tag)
        logger.info("Created tag %s for user %s", tag.id, owner_id)
        return self._to_response(tag, 0)

    async def get(self, owner_id: UUID, tag_id: UUID) -> TagResponse:
        """
        Get a tag with its bookmark count.

        Raises:
            NotFoundError: If the tag does not exist or belongs to another user.
        """
        query = self._with_counts(owner_id).where(Tag.id == tag_id)
        row = (await self.db.execute(query)).one_or_none()
        if row is None:
            raise NotFoundError(self.entity_name)
        return self._to_response(row.Tag, row.bookmark_count)

    async def list_tags(
        self,
        owner_id: UUID,
        page: int = 1,
        page_size: int | None = None,
        search: str | None = None,
        sort_by: TagSortField = "name",
        sort_order: Literal["asc", "desc"] = "asc",
    ) -> Page[TagResponse]:
        """
        List the owner's tags with bookmark counts, paginated.

        Args:
            owner_id: User ID to scope tags.
            page: 1-based page number.
            page_size: Page size (capped server side).
            search: Case-insensitive substring match on the tag name.
            sort_by: name, created_at, updated_at, or bookmark_count.
            sort_order: Sort direction.

        Returns:
            Page of TagResponse.
        """
        params = clamp_page_params(page, page_size)

        filters = [Tag.user_id == owner_id]
        if search:
            filters.append(Tag.name.ilike(contains_pattern(search)))

        count_query = select(func.count()).select_from(
            select(Tag.id).where(*filters).subquery(),
        )
        total = (await self.db.execute(count_query)).scalar() or 0

        bookmark_count = func.count(Bookmark.id)
        sort_columns = {
            "name": Tag.name,
            "created_at": Tag.created_at,
            "updated_at": Tag.updated_at,
            "bookmark_count": bookmark_count,
        }
        sort_column = sort_columns[sort_by]
        if sort_order == "desc":
            order = (sort_column.desc(), Tag.id.desc())
        else:
            order = (sort_column.asc(), Tag.id.asc())

        query = (
            self._with_counts(owner_id)
            .where(*filters)
            .order_by(*order)
            .offset(params.offset)
            .limit(params.page_size)
        )
        rows = (await self.db.execute(query)).all()
        items = [self._to_response(row.Tag, row.bookmark_count) for row in rows]
        return build_page(items, params, total)

    async def update(self, owner_id: UUID, tag_id: UUID, data: TagUpdate) -> TagResponse:
        """
        Rename a tag. Bookmarks carrying it reflect the new name automatically.

        Raises:
            NotFoundError: If the tag does not exist or belongs to another user.
            DuplicateNameError: If another of the owner's tags has the new name.
        """
        tag = await require_owned(self.db, Tag, tag_id, owner_id, self.entity_name)
        new_name = revalidate(validate_and_normalize_tag, data.name)

        if new_name != tag.name:
            duplicate = await self._get_by_name(owner_id, new_name)
            if duplicate is not None and duplicate.id != tag.id:
                raise DuplicateNameError(self.entity_name, new_name)

            tag.name = new_name
            tag.updated_at = func.clock_timestamp()
            try:
                async with self.db.begin_nested():
                    await self.db.flush()
            except IntegrityError as e:
                # Another request took the name between check and flush
                raise DuplicateNameError(self.entity_name, new_name) from e
            await self.db.refresh(tag)

        return await self.get(owner_id, tag.id)

    async def delete(self, owner_id: UUID, tag_id: UUID) -> None:
        """
        Delete a tag. Junction table entries cascade automatically.

        Raises:
            NotFoundError: If the tag does not exist or belongs to another user.
        """
        tag = await require_owned(self.db, Tag, tag_id, owner_id, self.entity_name)
        await self.db.delete(tag)
        await self.db.flush()
        logger.info("Deleted tag %s for user %s", tag_id, owner_id)

    async def list_tag_bookmarks(
        self,
        owner_id: UUID,
        tag_id: UUID,
        page: int = 1,
        page_size: int | None = None,
    ) -> tuple[TagResponse, Page[TaggedBookmarkItem]]:
        """
        Get a tag together with one page of the active bookmarks carrying it.

        Raises:
            NotFoundError: If the tag does not exist or belongs to another user.
        """
        tag = await self.get(owner_id, tag_id)
        params = clamp_page_params(page, page_size)

        has_tag = exists(
            select(bookmark_tags.c.bookmark_id).where(
                bookmark_tags.c.bookmark_id == Bookmark.id,
                bookmark_tags.c.tag_id == tag_id,
            ),
        )
        filters = [
            Bookmark.user_id == owner_id,
            Bookmark.deleted_at.is_(None),
            has_tag,
        ]

        count_query = select(func.count()).select_from(
            select(Bookmark.id).where(*filters).subquery(),
        )
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            select(
                Bookmark.id,
                Bookmark.personal_title,
                Bookmark.created_at,
                WebsiteMetadata.url,
                WebsiteMetadata.title,
            )
            .join(WebsiteMetadata, Bookmark.website_metadata_id == WebsiteMetadata.id)
            .where(*filters)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .offset(params.offset)
            .limit(params.page_size)
        )
        rows = (await self.db.execute(query)).all()
        items = [
            TaggedBookmarkItem(
                id=row.id,
                title=row.personal_title or row.title or "Untitled",
                url=row.url,
                created_at=row.created_at,
            )
            for row in rows
        ]
        return tag, build_page(items, params, total)

    # --- Helpers ---

    async def get_owned_tags(self, owner_id: UUID, tag_ids: Iterable[UUID]) -> list[Tag]:
        """Return the subset of tag_ids that belong to owner_id."""
        ids = set(tag_ids)
        if not ids:
            return []
        result = await self.db.execute(
            select(Tag).where(Tag.user_id == owner_id, Tag.id.in_(ids)),
        )
        return list(result.scalars())

    async def _get_by_name(self, owner_id: UUID, name: str) -> Tag | None:
        result = await self.db.execute(
            select(Tag).where(Tag.user_id == owner_id, Tag.name == name),
        )
        return result.scalar_one_or_none()

    def _with_counts(self, owner_id: UUID) -> Select:
        """Tags of one owner, each with a count of its non-deleted bookmarks."""
        return (
            select(Tag, func.count(Bookmark.id).label("bookmark_count"))
            .outerjoin(bookmark_tags, Tag.id == bookmark_tags.c.tag_id)
            .outerjoin(
                Bookmark,
                and_(
                    bookmark_tags.c.bookmark_id == Bookmark.id,
                    Bookmark.deleted_at.is_(None),
                ),
            )
            .where(Tag.user_id == owner_id)
            .group_by(Tag.id)
        )

    @staticmethod
    def _to_response(tag: Tag, bookmark_count: int) -> TagResponse:
        return TagResponse(
            id=tag.id,
            name=tag.name,
            created_at=tag.created_at,
            updated_at=tag.updated_at,
            bookmark_count=bookmark_count,
        )
