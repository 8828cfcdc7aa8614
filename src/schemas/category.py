"""Pydantic schemas for category endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schemas.common import Pagination
from schemas.validators import validate_category_name, validate_color


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Trim and validate the name."""
        return validate_category_name(v)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str | None) -> str | None:
        """Validate hex color."""
        return validate_color(v)


class CategoryUpdate(BaseModel):
    """Schema for partially updating a category."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        """Trim and validate the name if provided."""
        if v is None:
            return None
        return validate_category_name(v)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str | None) -> str | None:
        """Validate hex color."""
        return validate_color(v)

    @model_validator(mode="after")
    def reject_null_name(self) -> "CategoryUpdate":
        """A category always has a name."""
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("'name' cannot be null")
        return self


class CategoryResponse(BaseModel):
    """Schema for a category with its active bookmark count."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    color: str | None
    created_at: datetime
    updated_at: datetime
    bookmark_count: int = 0


class CategoryListResponse(BaseModel):
    """Schema for paginated category list responses."""

    items: list[CategoryResponse]
    pagination: Pagination
