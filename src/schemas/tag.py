"""Pydantic schemas for tag endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.common import Pagination
from schemas.validators import validate_and_normalize_tag


class TagCreate(BaseModel):
    """Schema for creating a tag."""

    name: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def normalize_and_validate(cls, v: str) -> str:
        """Normalize and validate the tag name."""
        return validate_and_normalize_tag(v)


class TagUpdate(BaseModel):
    """Schema for renaming a tag."""

    name: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def normalize_and_validate(cls, v: str) -> str:
        """Normalize and validate the new tag name."""
        return validate_and_normalize_tag(v)


class TagResponse(BaseModel):
    """Schema for a tag with its active bookmark count."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
    bookmark_count: int = 0


class TagListResponse(BaseModel):
    """Schema for paginated tag list responses."""

    items: list[TagResponse]
    pagination: Pagination


class TaggedBookmarkItem(BaseModel):
    """Compact bookmark entry listed under a tag."""

    id: UUID
    title: str  # personal title, else metadata title, else "Untitled"
    url: str
    created_at: datetime


class TagBookmarksResponse(BaseModel):
    """A tag together with one page of the bookmarks carrying it."""

    tag: TagResponse
    items: list[TaggedBookmarkItem]
    pagination: Pagination
