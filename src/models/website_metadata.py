"""Website metadata shared by every bookmark pointing at the same URL."""
from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class WebsiteMetadata(Base, UUIDv7Mixin, TimestampMixin):
    """
    One row per distinct URL across all users.

    Descriptive fields start out empty; enrichment is not performed at
    bookmark creation time.
    """

    __tablename__ = "website_metadata"
    __table_args__ = (
        UniqueConstraint("url", name="uq_website_metadata_url"),
    )

    # id provided by UUIDv7Mixin
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    favicon: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
