"""
Service layer for the bookmark aggregate.

A bookmark is always returned together with its shared website metadata, its
category, and its tags. Every mutation re-reads the aggregate before returning
so the caller sees the committed shape, not stale in-session state.
"""
import logging
from collections.abc import Iterable
from typing import Literal
from uuid import UUID

from sqlalchemy import delete, exists, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.bookmark import Bookmark
from models.category import Category
from models.tag import Tag, bookmark_tags
from models.website_metadata import WebsiteMetadata
from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from schemas.validators import validate_and_normalize_tags, validate_url
from services.exceptions import InvalidReferenceError, NotFoundError
from services.find_or_create import unwrap
from services.ownership import get_owned, require_owned
from services.pagination import Page, build_page, clamp_page_params
from services.tag_service import TagService
from services.utils import contains_pattern, revalidate
from services.website_metadata_service import WebsiteMetadataService

logger = logging.getLogger(__name__)

BookmarkSortField = Literal["created_at", "updated_at", "title"]

# Eager loads that make up the aggregate
AGGREGATE_OPTIONS = (
    selectinload(Bookmark.website_metadata),
    selectinload(Bookmark.category),
    selectinload(Bookmark.tags),
)

# Fields a partial update may set directly on the bookmark row
UPDATABLE_FIELDS = ("personal_title", "personal_note", "category_id", "is_public")


def _tag_exists(*criteria: object) -> object:
    """EXISTS clause over the current bookmark's tags matching `criteria`."""
    return exists(
        select(bookmark_tags.c.bookmark_id)
        .join(Tag, Tag.id == bookmark_tags.c.tag_id)
        .where(bookmark_tags.c.bookmark_id == Bookmark.id, *criteria),
    )


class BookmarkService:
    """Create, read, update, soft-delete and restore bookmark aggregates."""

    entity_name = "Bookmark"

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.metadata_service = WebsiteMetadataService(db)
        self.tag_service = TagService(db)

    async def create(self, owner_id: UUID, data: BookmarkCreate) -> Bookmark:
        """
        Create a bookmark with its metadata reference and tags.

        All writes run inside one SAVEPOINT: if anything fails after the
        bookmark insert, nothing from this call is left behind.

        Args:
            owner_id: User ID creating the bookmark.
            data: Validated create payload.

        Returns:
            The hydrated aggregate.

        Raises:
            ValidationError: If the URL or a tag name is invalid.
            InvalidReferenceError: If category_id is not one of the owner's categories.
        """
        url = revalidate(validate_url, data.url)

        async with self.db.begin_nested():
            if data.category_id is not None:
                await self._require_category(owner_id, data.category_id)

            metadata = unwrap(await self.metadata_service.get_or_create(url))

            bookmark = Bookmark(
                user_id=owner_id,
                website_metadata_id=metadata.id,
                category_id=data.category_id,
                personal_title=data.personal_title,
                personal_note=data.personal_note,
                is_public=data.is_public,
            )
            self.db.add(bookmark)
            await self.db.flush()

            tag_ids = await self.tag_service.resolve_ids(owner_id, data.tags)
            await self._attach_tags(bookmark.id, tag_ids)

        logger.info("Created bookmark %s for user %s", bookmark.id, owner_id)
        return await self._hydrate(owner_id, bookmark.id)

    async def get(
        self,
        owner_id: UUID,
        bookmark_id: UUID,
        include_deleted: bool = False,
    ) -> Bookmark:
        """
        Get a bookmark aggregate.

        Raises:
            NotFoundError: If absent, owned by another user, or soft-deleted
                (unless include_deleted).
        """
        return await self._hydrate(owner_id, bookmark_id, include_deleted=include_deleted)

    async def list_bookmarks(
        self,
        owner_id: UUID,
        page: int = 1,
        page_size: int | None = None,
        search: str | None = None,
        category_id: UUID | None = None,
        is_public: bool | None = None,
        tags: list[str] | None = None,
        tag_match: Literal["all", "any"] = "all",
        sort_by: BookmarkSortField = "created_at",
        sort_order: Literal["asc", "desc"] = "desc",
    ) -> Page[Bookmark]:
        """
        List active bookmarks with filtering, search, and pagination.

        Args:
            owner_id: User ID to scope bookmarks.
            page: 1-based page number.
            page_size: Page size (capped server side).
            search: Case-insensitive substring matched against personal title,
                personal note, metadata title, metadata URL, or any tag name.
            category_id: Only bookmarks in this category.
            is_public: Only public (True) or private (False) bookmarks.
            tags: Tag names to filter by (normalized before matching).
            tag_match: "all" (must have every tag) or "any" (at least one).
            sort_by: created_at, updated_at, or title.
            sort_order: Sort direction.

        Returns:
            Page of hydrated Bookmark aggregates.

        Raises:
            ValidationError: On bad pagination values or tag names.
        """
        params = clamp_page_params(page, page_size)

        filters = [Bookmark.user_id == owner_id, Bookmark.deleted_at.is_(None)]
        if category_id is not None:
            filters.append(Bookmark.category_id == category_id)
        if is_public is not None:
            filters.append(Bookmark.is_public == is_public)
        if search:
            pattern = contains_pattern(search)
            filters.append(
                or_(
                    Bookmark.personal_title.ilike(pattern),
                    Bookmark.personal_note.ilike(pattern),
                    WebsiteMetadata.title.ilike(pattern),
                    WebsiteMetadata.url.ilike(pattern),
                    _tag_exists(Tag.name.ilike(pattern)),
                ),
            )
        if tags:
            tag_names = revalidate(validate_and_normalize_tags, tags)
            if tag_names and tag_match == "all":
                filters.extend(_tag_exists(Tag.name == name) for name in tag_names)
            elif tag_names:
                filters.append(_tag_exists(Tag.name.in_(tag_names)))

        base = (
            select(Bookmark)
            .join(WebsiteMetadata, Bookmark.website_metadata_id == WebsiteMetadata.id)
            .where(*filters)
        )

        count_query = select(func.count()).select_from(
            base.with_only_columns(Bookmark.id).subquery(),
        )
        total = (await self.db.execute(count_query)).scalar() or 0

        sort_columns = {
            "created_at": Bookmark.created_at,
            "updated_at": Bookmark.updated_at,
            "title": func.coalesce(
                Bookmark.personal_title, WebsiteMetadata.title, WebsiteMetadata.url,
            ),
        }
        sort_column = sort_columns[sort_by]
        if sort_order == "desc":
            order = (sort_column.desc(), Bookmark.created_at.desc(), Bookmark.id.desc())
        else:
            order = (sort_column.asc(), Bookmark.created_at.asc(), Bookmark.id.asc())

        query = (
            base.options(*AGGREGATE_OPTIONS)
            .order_by(*order)
            .offset(params.offset)
            .limit(params.page_size)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return build_page(list(result.scalars()), params, total)

    async def update(
        self,
        owner_id: UUID,
        bookmark_id: UUID,
        data: BookmarkUpdate,
    ) -> Bookmark:
        """
        Partially update a bookmark.

        Only fields present in the request are applied. A present `tags` list
        replaces the whole tag set: every junction row is removed, then the
        resolved set is inserted, in one SAVEPOINT.

        Raises:
            NotFoundError: If the bookmark is absent, foreign, or soft-deleted.
            InvalidReferenceError: If category_id is not one of the owner's categories.
            ValidationError: If a tag name is invalid.
        """
        bookmark = await require_owned(
            self.db, Bookmark, bookmark_id, owner_id, self.entity_name,
        )
        fields_set = data.model_fields_set
        if not fields_set:
            return await self._hydrate(owner_id, bookmark.id)

        async with self.db.begin_nested():
            if "category_id" in fields_set and data.category_id is not None:
                await self._require_category(owner_id, data.category_id)

            for field in UPDATABLE_FIELDS:
                if field in fields_set:
                    setattr(bookmark, field, getattr(data, field))

            if "tags" in fields_set:
                tag_ids = await self.tag_service.resolve_ids(owner_id, data.tags or [])
                await self.db.execute(
                    delete(bookmark_tags).where(bookmark_tags.c.bookmark_id == bookmark.id),
                )
                await self._attach_tags(bookmark.id, tag_ids)

            await self._touch(bookmark)

        return await self._hydrate(owner_id, bookmark.id)

    async def delete(self, owner_id: UUID, bookmark_id: UUID) -> None:
        """
        Soft delete a bookmark by setting deleted_at.

        Raises:
            NotFoundError: If absent, foreign, or already deleted.
        """
        bookmark = await require_owned(
            self.db, Bookmark, bookmark_id, owner_id, self.entity_name,
        )
        bookmark.deleted_at = func.clock_timestamp()
        await self.db.flush()
        logger.info("Soft-deleted bookmark %s for user %s", bookmark_id, owner_id)

    async def restore(self, owner_id: UUID, bookmark_id: UUID) -> Bookmark:
        """
        Restore a soft-deleted bookmark.

        Raises:
            NotFoundError: If absent, foreign, or not currently deleted.
        """
        bookmark = await get_owned(
            self.db, Bookmark, bookmark_id, owner_id, include_deleted=True,
        )
        if bookmark is None or bookmark.deleted_at is None:
            raise NotFoundError(self.entity_name)

        bookmark.deleted_at = None
        await self._touch(bookmark)
        logger.info("Restored bookmark %s for user %s", bookmark_id, owner_id)
        return await self._hydrate(owner_id, bookmark.id)

    async def add_tags(
        self,
        owner_id: UUID,
        bookmark_id: UUID,
        tag_ids: Iterable[UUID],
    ) -> Bookmark:
        """
        Attach existing tags by id. Already-attached tags are left as is.

        Raises:
            NotFoundError: If the bookmark is absent, foreign, or soft-deleted.
            InvalidReferenceError: If any tag id is not one of the owner's tags.
        """
        bookmark = await require_owned(
            self.db, Bookmark, bookmark_id, owner_id, self.entity_name,
        )
        requested = set(tag_ids)
        owned = await self.tag_service.get_owned_tags(owner_id, requested)
        if len(owned) != len(requested):
            raise InvalidReferenceError("Tag")

        await self._attach_tags(bookmark.id, requested)
        await self._touch(bookmark)
        return await self._hydrate(owner_id, bookmark.id)

    async def remove_tag(self, owner_id: UUID, bookmark_id: UUID, tag_id: UUID) -> Bookmark:
        """
        Detach one tag. Detaching a tag that is not attached is a no-op.

        Raises:
            NotFoundError: If the bookmark is absent, foreign, or soft-deleted.
        """
        bookmark = await require_owned(
            self.db, Bookmark, bookmark_id, owner_id, self.entity_name,
        )
        result = await self.db.execute(
            delete(bookmark_tags).where(
                bookmark_tags.c.bookmark_id == bookmark.id,
                bookmark_tags.c.tag_id == tag_id,
            ),
        )
        if result.rowcount:
            await self._touch(bookmark)
        return await self._hydrate(owner_id, bookmark.id)

    async def set_category(
        self,
        owner_id: UUID,
        bookmark_id: UUID,
        category_id: UUID | None,
    ) -> Bookmark:
        """
        Move a bookmark to a category, or out of any category with None.

        Raises:
            NotFoundError: If the bookmark is absent, foreign, or soft-deleted.
            InvalidReferenceError: If category_id is not one of the owner's categories.
        """
        bookmark = await require_owned(
            self.db, Bookmark, bookmark_id, owner_id, self.entity_name,
        )
        if category_id is not None:
            await self._require_category(owner_id, category_id)

        bookmark.category_id = category_id
        await self._touch(bookmark)
        return await self._hydrate(owner_id, bookmark.id)

    # --- Helpers ---

    async def _hydrate(
        self,
        owner_id: UUID,
        bookmark_id: UUID,
        include_deleted: bool = False,
    ) -> Bookmark:
        return await require_owned(
            self.db,
            Bookmark,
            bookmark_id,
            owner_id,
            self.entity_name,
            options=AGGREGATE_OPTIONS,
            include_deleted=include_deleted,
        )

    async def _require_category(self, owner_id: UUID, category_id: UUID) -> Category:
        category = await get_owned(self.db, Category, category_id, owner_id)
        if category is None:
            raise InvalidReferenceError("Category")
        return category

    async def _attach_tags(self, bookmark_id: UUID, tag_ids: Iterable[UUID]) -> None:
        rows = [{"bookmark_id": bookmark_id, "tag_id": tag_id} for tag_id in tag_ids]
        if not rows:
            return
        await self.db.execute(
            pg_insert(bookmark_tags).values(rows).on_conflict_do_nothing(),
        )

    async def _touch(self, bookmark: Bookmark) -> None:
        bookmark.updated_at = func.clock_timestamp()
        await self.db.flush()
