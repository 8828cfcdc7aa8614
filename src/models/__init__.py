"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.tag import Tag, bookmark_tags  # Must be before bookmark due to import
from models.bookmark import Bookmark
from models.category import Category
from models.user import User
from models.website_metadata import WebsiteMetadata

__all__ = [
    "Base",
    "Bookmark",
    "Category",
    "Tag",
    "TimestampMixin",
    "UUIDv7Mixin",
    "User",
    "WebsiteMetadata",
    "bookmark_tags",
]
