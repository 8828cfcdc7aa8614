"""Service layer for category operations."""
import logging
from typing import Literal
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from models.bookmark import Bookmark
from models.category import Category
from schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from services.exceptions import DuplicateNameError, NotFoundError
from services.ownership import get_owned, require_owned
from services.pagination import Page, build_page, clamp_page_params
from services.utils import contains_pattern

logger = logging.getLogger(__name__)

CategorySortField = Literal["name", "created_at", "updated_at", "bookmark_count"]


class CategoryService:
    """
    Per-user categories. A bookmark belongs to at most one category.

    Deleting a category leaves its bookmarks in place, uncategorized.
    """

    entity_name = "Category"

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, owner_id: UUID, data: CategoryCreate) -> CategoryResponse:
        """
        Create a category.

        Raises:
            DuplicateNameError: If the owner already has a category with this name.
        """
        if await self._get_by_name(owner_id, data.name) is not None:
            raise DuplicateNameError(self.entity_name, data.name)

        category = Category(
            user_id=owner_id,
            name=data.name,
            description=data.description,
            color=data.color,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(category)
                await self.db.flush()
        except IntegrityError as e:
            raise DuplicateNameError(self.entity_name, data.name) from e

        await self.db.refresh(category)
        logger.info("Created category %s for user %s", category.id, owner_id)
        return self._to_response(category, 0)

    async def get(self, owner_id: UUID, category_id: UUID) -> CategoryResponse:
        """
        Get a category with its active bookmark count.

        Raises:
            NotFoundError: If the category does not exist or belongs to another user.
        """
        query = self._with_counts(owner_id).where(Category.id == category_id)
        row = (await self.db.execute(query)).one_or_none()
        if row is None:
            raise NotFoundError(self.entity_name)
        return self._to_response(row.Category, row.bookmark_count)

    async def get_category(self, owner_id: UUID, category_id: UUID) -> Category | None:
        """Return the owner's Category row (no counts), or None."""
        return await get_owned(self.db, Category, category_id, owner_id)

    async def list_categories(
        self,
        owner_id: UUID,
        page: int = 1,
        page_size: int | None = None,
        search: str | None = None,
        sort_by: CategorySortField = "name",
        sort_order: Literal["asc", "desc"] = "asc",
    ) -> Page[CategoryResponse]:
        """
        List the owner's categories with bookmark counts, paginated.

        Args:
            owner_id: User ID to scope categories.
            page: 1-based page number.
            page_size: Page size (capped server side).
            search: Case-insensitive substring match on name or description.
            sort_by: name, created_at, updated_at, or bookmark_count.
            sort_order: Sort direction.
        """
        params = clamp_page_params(page, page_size)

        filters = [Category.user_id == owner_id]
        if search:
            pattern = contains_pattern(search)
            filters.append(
                Category.name.ilike(pattern) | Category.description.ilike(pattern),
            )

        count_query = select(func.count()).select_from(
            select(Category.id).where(*filters).subquery(),
        )
        total = (await self.db.execute(count_query)).scalar() or 0

        sort_columns = {
            "name": Category.name,
            "created_at": Category.created_at,
            "updated_at": Category.updated_at,
            "bookmark_count": func.count(Bookmark.id),
        }
        sort_column = sort_columns[sort_by]
        if sort_order == "desc":
            order = (sort_column.desc(), Category.id.desc())
        else:
            order = (sort_column.asc(), Category.id.asc())

        query = (
            self._with_counts(owner_id)
            .where(*filters)
            .order_by(*order)
            .offset(params.offset)
            .limit(params.page_size)
        )
        rows = (await self.db.execute(query)).all()
        items = [self._to_response(row.Category, row.bookmark_count) for row in rows]
        return build_page(items, params, total)

    async def update(
        self,
        owner_id: UUID,
        category_id: UUID,
        data: CategoryUpdate,
    ) -> CategoryResponse:
        """
        Partially update a category. Only fields present in the request change.

        Raises:
            NotFoundError: If the category does not exist or belongs to another user.
            DuplicateNameError: If another of the owner's categories has the new name.
        """
        category = await require_owned(
            self.db, Category, category_id, owner_id, self.entity_name,
        )
        update_data = data.model_dump(exclude_unset=True)

        new_name = update_data.get("name")
        if new_name is not None and new_name != category.name:
            duplicate = await self._get_by_name(owner_id, new_name)
            if duplicate is not None and duplicate.id != category.id:
                raise DuplicateNameError(self.entity_name, new_name)

        if update_data:
            for field, value in update_data.items():
                setattr(category, field, value)
            category.updated_at = func.clock_timestamp()
            try:
                async with self.db.begin_nested():
                    await self.db.flush()
            except IntegrityError as e:
                raise DuplicateNameError(self.entity_name, new_name or category.name) from e
            await self.db.refresh(category)

        return await self.get(owner_id, category.id)

    async def delete(self, owner_id: UUID, category_id: UUID) -> None:
        """
        Delete a category. Its bookmarks are kept with category_id set to NULL.

        Raises:
            NotFoundError: If the category does not exist or belongs to another user.
        """
        category = await require_owned(
            self.db, Category, category_id, owner_id, self.entity_name,
        )
        await self.db.delete(category)
        await self.db.flush()
        logger.info("Deleted category %s for user %s", category_id, owner_id)

    async def _get_by_name(self, owner_id: UUID, name: str) -> Category | None:
        result = await self.db.execute(
            select(Category).where(Category.user_id == owner_id, Category.name == name),
        )
        return result.scalar_one_or_none()

    def _with_counts(self, owner_id: UUID) -> Select:
        return (
            select(Category, func.count(Bookmark.id).label("bookmark_count"))
            .outerjoin(
                Bookmark,
                and_(
                    Bookmark.category_id == Category.id,
                    Bookmark.deleted_at.is_(None),
                ),
            )
            .where(Category.user_id == owner_id)
            .group_by(Category.id)
        )

    @staticmethod
    def _to_response(category: Category, bookmark_count: int) -> CategoryResponse:
        return CategoryResponse(
            id=category.id,
            name=category.name,
            description=category.description,
            color=category.color,
            created_at=category.created_at,
            updated_at=category.updated_at,
            bookmark_count=bookmark_count,
        )
