"""Bookmark model for storing user bookmarks."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.tag import Tag, bookmark_tags

if TYPE_CHECKING:
    from models.category import Category
    from models.user import User
    from models.website_metadata import WebsiteMetadata


class Bookmark(Base, UUIDv7Mixin, TimestampMixin):
    """
    Bookmark model - a user's personal view of a shared website.

    The URL itself lives on WebsiteMetadata; the bookmark carries the
    personal title/note, visibility, optional category, and tags.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (
        Index("ix_bookmarks_user_id_deleted_at", "user_id", "deleted_at"),
        Index("ix_bookmarks_created_at", "created_at"),
    )

    # id provided by UUIDv7Mixin
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Shared metadata must outlive any single bookmark
    website_metadata_id: Mapped[UUID] = mapped_column(
        ForeignKey("website_metadata.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    personal_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    personal_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )

    # Soft delete timestamp
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None,
    )

    user: Mapped["User"] = relationship(back_populates="bookmarks")
    website_metadata: Mapped["WebsiteMetadata"] = relationship()
    category: Mapped["Category | None"] = relationship()
    # Junction rows are written explicitly by the service layer
    tags: Mapped[list[Tag]] = relationship(
        secondary=bookmark_tags,
        viewonly=True,
        order_by=Tag.name,
    )
