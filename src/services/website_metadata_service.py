"""Service layer for shared website metadata."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.website_metadata import WebsiteMetadata
from services.find_or_create import (
    AlreadyExists,
    Created,
    FindOrCreateResult,
    insert_or_fetch,
)

logger = logging.getLogger(__name__)


class WebsiteMetadataService:
    """Guarantees at most one metadata row per URL across all users."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_url(self, url: str) -> WebsiteMetadata | None:
        """Exact-match lookup by URL."""
        result = await self.db.execute(
            select(WebsiteMetadata).where(WebsiteMetadata.url == url),
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, url: str) -> FindOrCreateResult[WebsiteMetadata]:
        """
        Return the metadata row for `url`, creating an empty placeholder if absent.

        Idempotent. Concurrent first-time calls for the same URL are settled by
        the unique constraint on url; the loser re-selects the winner's row.

        Args:
            url: Already-validated URL; compared as an exact string.

        Returns:
            Created(metadata) or AlreadyExists(metadata).
        """
        existing = await self.get_by_url(url)
        if existing is not None:
            return AlreadyExists(existing)

        # Descriptive fields are left empty; enrichment happens elsewhere
        placeholder = WebsiteMetadata(
            url=url,
            title=None,
            description=None,
            favicon=None,
            image=None,
        )
        result = await insert_or_fetch(self.db, placeholder, lambda: self.get_by_url(url))
        if isinstance(result, Created):
            logger.info("Created website metadata %s", result.row.id)
        return result
