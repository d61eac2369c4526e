"""Service for image and attribution queries.

Every method opens its own session so the listing can run independent
queries concurrently. Storage errors are logged and re-raised; nothing here
retries or substitutes partial results.
"""

import logging
from collections.abc import Collection
from datetime import datetime as dt

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Select

from chirpchirp.database.core import CoreDatabaseService
from chirpchirp.images.models import Attribution, Image

logger = logging.getLogger(__name__)


class ImageQueryService:
    """Read-only queries over the images and attributions tables."""

    def __init__(self, core_database: CoreDatabaseService):
        """Initialize image query service.

        Args:
            core_database: Database service holding the store connection
        """
        self.core_database = core_database

    def _apply_time_window(self, stmt: Select, since: dt | None) -> Select:
        """Restrict a statement to images captured at or after ``since``."""
        if since is not None:
            stmt = stmt.where(Image.taken_on >= since)  # type: ignore[operator]
        return stmt

    async def count_images(self, since: dt | None = None) -> int:
        """Count images in the time window.

        Args:
            since: Earliest capture time to include, None for all images

        Returns:
            Number of images in the window, regardless of their attributions
        """
        async with self.core_database.get_async_db() as session:
            try:
                stmt = self._apply_time_window(select(func.count()).select_from(Image), since)
                count = await session.scalar(stmt)
                return count or 0
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Error counting images")
                raise

    async def fetch_image_page(self, since: dt | None, offset: int, limit: int) -> list[Image]:
        """Fetch one page of images, newest capture first.

        Args:
            since: Earliest capture time to include, None for all images
            offset: Number of rows to skip
            limit: Maximum number of rows to return

        Returns:
            The images in the offset window; shorter or empty past the end
        """
        async with self.core_database.get_async_db() as session:
            try:
                stmt = self._apply_time_window(select(Image), since)
                stmt = (
                    stmt.order_by(desc(Image.taken_on), Image.id)  # type: ignore[arg-type]
                    .offset(offset)
                    .limit(limit)
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Error fetching image page (offset=%d, limit=%d)", offset, limit)
                raise

    async def load_attributions(self, image_ids: Collection[str]) -> list[Attribution]:
        """Load every attribution belonging to the given images.

        Args:
            image_ids: Image ids from the current page

        Returns:
            Attribution records in no particular order
        """
        if not image_ids:
            return []

        async with self.core_database.get_async_db() as session:
            try:
                stmt = select(Attribution).where(
                    Attribution.image_id.in_(list(image_ids))  # type: ignore[attr-defined]
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Error loading attributions for %d images", len(image_ids))
                raise

    async def get_image(self, image_id: str) -> Image | None:
        """Get a single image by id.

        Returns:
            The image, or None when no row matches
        """
        async with self.core_database.get_async_db() as session:
            try:
                return await session.get(Image, image_id)
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Error fetching image %s", image_id)
                raise

    async def get_image_attributions(self, image_id: str) -> list[Attribution]:
        """Get the attributions of one image, highest confidence first."""
        async with self.core_database.get_async_db() as session:
            try:
                stmt = (
                    select(Attribution)
                    .where(Attribution.image_id == image_id)
                    .order_by(desc(Attribution.confidence))  # type: ignore[arg-type]
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Error fetching attributions for image %s", image_id)
                raise

    async def list_species_labels(self) -> list[str | None]:
        """Get the species label of every attribution in the store."""
        async with self.core_database.get_async_db() as session:
            try:
                result = await session.execute(select(Attribution.species))
                return list(result.scalars().all())
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Error scanning attribution species")
                raise
