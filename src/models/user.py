"""User model for storing registered accounts."""
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark
    from models.category import Category
    from models.tag import Tag


class User(Base, UUIDv7Mixin, TimestampMixin):
    """User model - owns categories, tags, and bookmarks."""

    __tablename__ = "users"

    # id provided by UUIDv7Mixin
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="Lower-cased login email",
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Children are removed by ON DELETE CASCADE, never loaded for deletion
    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="user", passive_deletes=True,
    )
    categories: Mapped[list["Category"]] = relationship(
        back_populates="user", passive_deletes=True,
    )
    tags: Mapped[list["Tag"]] = relationship(
        back_populates="user", passive_deletes=True,
    )
