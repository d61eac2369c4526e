"""Image listing pipeline.

Resolves the time window, fetches one page of images with its windowed count,
loads and groups the page's attributions, filters the images and builds the
pagination metadata.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from chirpchirp.images.composition import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    Pagination,
    SpeciesCount,
    aggregate_species,
    build_pagination,
    compose_results,
    group_attributions,
)
from chirpchirp.images.models import Attribution, ImageWithAttributions
from chirpchirp.images.queries import ImageQueryService
from chirpchirp.images.time_windows import TimeRange, parse_time_range, resolve_time_window

logger = logging.getLogger(__name__)


@dataclass
class ImagePage:
    """One page of filtered images for a single request."""

    images: list[ImageWithAttributions]
    pagination: Pagination
    time_range: TimeRange
    species: str | None = None


class ImageListingService:
    """Builds image pages and species summaries from the query service."""

    def __init__(
        self,
        query_service: ImageQueryService,
        default_page: int = DEFAULT_PAGE,
        default_limit: int = DEFAULT_LIMIT,
    ):
        self.query_service = query_service
        self.default_page = default_page
        self.default_limit = default_limit

    async def list_images(
        self,
        page: int,
        limit: int,
        time_range: TimeRange | str | None = TimeRange.ALL,
        species: str | None = None,
        now: datetime | None = None,
    ) -> ImagePage:
        """List one page of images that carry a valid species identification.

        Args:
            page: 1-indexed page number
            limit: Page size
            time_range: Time range token, unknown values behave like All
            species: Optional exact species label every returned image must carry
            now: Reference time for the time window (defaults to current UTC time)

        Returns:
            ImagePage whose pagination counts the whole time window, not the filtered images
        """
        resolved_range = parse_time_range(time_range)
        since = resolve_time_window(resolved_range, now)
        offset = (page - 1) * limit

        total, images = await asyncio.gather(
            self.query_service.count_images(since),
            self.query_service.fetch_image_page(since, offset, limit),
        )
        pagination = build_pagination(page, limit, total)

        if not images:
            return ImagePage(
                images=[], pagination=pagination, time_range=resolved_range, species=species
            )

        attributions = await self.query_service.load_attributions([image.id for image in images])
        composed = compose_results(images, group_attributions(attributions), species)

        logger.debug(
            "Composed image page %d: %d of %d images kept (time_range=%s, species=%s)",
            page,
            len(composed),
            len(images),
            resolved_range.value,
            species,
        )

        return ImagePage(
            images=composed,
            pagination=pagination,
            time_range=resolved_range,
            species=species,
        )

    async def get_image_detail(self, image_id: str) -> ImageWithAttributions | None:
        """Get one image with all its attributions, highest confidence first.

        Returns:
            The enriched image, or None when the id does not resolve. No
            attribution query is made for a missing image.
        """
        image = await self.query_service.get_image(image_id)
        if image is None:
            return None

        attributions = await self.query_service.get_image_attributions(image_id)
        return ImageWithAttributions.from_image(image, list(attributions))

    async def get_image_attributions(self, image_id: str) -> list[Attribution]:
        """Get the attributions of one image, highest confidence first."""
        return await self.query_service.get_image_attributions(image_id)

    async def summarize_species(self) -> list[SpeciesCount]:
        """Count valid species labels across every attribution, most frequent first."""
        labels = await self.query_service.list_species_labels()
        return aggregate_species(labels)
