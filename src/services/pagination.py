"""Page-number pagination helpers shared by list operations."""
from dataclasses import dataclass
from typing import Generic, TypeVar

from core.config import get_settings
from schemas.common import Pagination
from services.exceptions import ValidationError

ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class PageParams:
    """Validated page request."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        """Row offset of the first item on this page."""
        return (self.page - 1) * self.page_size


@dataclass
class Page(Generic[ItemT]):
    """One page of results plus its pagination metadata."""

    items: list[ItemT]
    pagination: Pagination


def clamp_page_params(page: int = 1, page_size: int | None = None) -> PageParams:
    """
    Validate a page request and cap page_size at the server-side ceiling.

    Args:
        page: 1-based page number.
        page_size: Requested page size; None uses the configured default.

    Raises:
        ValidationError: If page or page_size is below 1.
    """
    settings = get_settings()
    if page_size is None:
        page_size = settings.default_page_size
    if page < 1:
        raise ValidationError("page must be at least 1")
    if page_size < 1:
        raise ValidationError("page_size must be at least 1")
    return PageParams(page=page, page_size=min(page_size, settings.max_page_size))


def build_page(items: list[ItemT], params: PageParams, total: int) -> Page[ItemT]:
    """Wrap a page of items with pagination metadata."""
    return Page(
        items=items,
        pagination=Pagination.build(params.page, params.page_size, total),
    )
