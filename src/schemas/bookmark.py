"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from schemas.common import Pagination
from schemas.validators import (
    validate_and_normalize_tags,
    validate_note_length,
    validate_title_length,
    validate_url,
)


class BookmarkCreate(BaseModel):
    """Schema for creating a new bookmark."""

    # Kept as the caller's string (after validation) so equal URLs share metadata
    url: str
    personal_title: str | None = None
    personal_note: str | None = None
    category_id: UUID | None = None
    is_public: bool = False
    # null is accepted and treated as no tags
    tags: list[str] | None = []

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Validate the URL is absolute http(s)."""
        return validate_url(v)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)

    @field_validator("personal_title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("personal_note")
    @classmethod
    def check_note_length(cls, v: str | None) -> str | None:
        """Validate note length."""
        return validate_note_length(v)


class BookmarkUpdate(BaseModel):
    """
    Schema for partially updating a bookmark.

    Only fields present in the request are applied. `tags`, when present,
    replaces the whole tag set. `category_id: null` clears the category.
    """

    personal_title: str | None = None
    personal_note: str | None = None
    category_id: UUID | None = None
    is_public: bool | None = None
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        """Normalize and validate tags if provided."""
        if v is None:
            return None
        return validate_and_normalize_tags(v)

    @field_validator("personal_title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("personal_note")
    @classmethod
    def check_note_length(cls, v: str | None) -> str | None:
        """Validate note length."""
        return validate_note_length(v)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "BookmarkUpdate":
        """is_public and tags cannot be cleared with null."""
        for field in ("is_public", "tags"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"'{field}' cannot be null")
        return self


class BookmarkTagsAdd(BaseModel):
    """Schema for attaching existing tags to a bookmark by id."""

    tag_ids: list[UUID]


class BookmarkCategorySet(BaseModel):
    """Schema for moving a bookmark to a category (null removes it)."""

    category_id: UUID | None


class WebsiteMetadataResponse(BaseModel):
    """Shared metadata for the bookmarked URL."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    title: str | None
    description: str | None
    favicon: str | None
    image: str | None


class CategorySummary(BaseModel):
    """Category as embedded in a bookmark."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    color: str | None


class TagSummary(BaseModel):
    """Tag as embedded in a bookmark."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class BookmarkResponse(BaseModel):
    """
    Schema for the bookmark aggregate.

    Built from a Bookmark whose website_metadata, category, and tags
    relationships have been eagerly loaded.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    personal_title: str | None
    personal_note: str | None
    is_public: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
    website_metadata: WebsiteMetadataResponse
    category: CategorySummary | None
    tags: list[TagSummary]


class BookmarkListResponse(BaseModel):
    """Schema for paginated bookmark list responses."""

    items: list[BookmarkResponse]
    pagination: Pagination
