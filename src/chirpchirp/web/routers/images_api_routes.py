"""Image listing and lookup endpoints."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from chirpchirp.images.composition import parse_page_param
from chirpchirp.images.listing import ImageListingService
from chirpchirp.web.core.container import Container
from chirpchirp.web.models.images import (
    ImageAttributionsResponse,
    ImageFilters,
    ImageNotFoundResponse,
    ImageResponse,
    PaginatedImagesResponse,
    PaginationInfo,
    attribution_responses,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images")


@router.get("", response_model=PaginatedImagesResponse)
@inject
async def list_images(
    listing_service: Annotated[
        ImageListingService, Depends(Provide[Container.image_listing_service])
    ],
    page: Annotated[str | None, Query(description="1-indexed page number")] = None,
    limit: Annotated[str | None, Query(description="Images per page")] = None,
    time_range: Annotated[
        str, Query(alias="timeRange", description="1D, 7D, 1M, 3M, 1YR or All")
    ] = "All",
    species: Annotated[str | None, Query(description="Exact species label")] = None,
) -> PaginatedImagesResponse:
    """List images that carry at least one species identification, newest first.

    Malformed page and limit values fall back to their defaults and unknown
    time ranges behave like All. Pagination totals count every image in the
    time window, including images the species filters drop from this page.
    """
    page_number = parse_page_param(page, listing_service.default_page)
    page_size = parse_page_param(limit, listing_service.default_limit)
    species_filter = species or None

    try:
        result = await listing_service.list_images(
            page=page_number, limit=page_size, time_range=time_range, species=species_filter
        )
    except SQLAlchemyError as e:
        logger.error("Error fetching images: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch images",
        ) from e

    return PaginatedImagesResponse(
        images=[ImageResponse.from_image(image) for image in result.images],
        pagination=PaginationInfo.from_pagination(result.pagination),
        filters=ImageFilters(time_range=result.time_range.value, species=result.species),
    )


@router.get(
    "/{image_id}",
    response_model=ImageResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ImageNotFoundResponse}},
)
@inject
async def get_image(
    image_id: str,
    listing_service: Annotated[
        ImageListingService, Depends(Provide[Container.image_listing_service])
    ],
) -> ImageResponse | JSONResponse:
    """Get one image with its attributions, highest confidence first."""
    try:
        image = await listing_service.get_image_detail(image_id)
    except SQLAlchemyError as e:
        logger.error("Error fetching image %s: %s", image_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch image {image_id}",
        ) from e

    if image is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ImageNotFoundResponse().model_dump(),
        )

    return ImageResponse.from_image(image)


@router.get("/{image_id}/attributions", response_model=ImageAttributionsResponse)
@inject
async def get_image_attributions(
    image_id: str,
    listing_service: Annotated[
        ImageListingService, Depends(Provide[Container.image_listing_service])
    ],
) -> ImageAttributionsResponse:
    """Get the attributions of one image, highest confidence first."""
    try:
        attributions = await listing_service.get_image_attributions(image_id)
    except SQLAlchemyError as e:
        logger.error("Error fetching attributions for %s: %s", image_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch attributions for image {image_id}",
        ) from e

    return ImageAttributionsResponse(
        image_id=image_id, attributions=attribution_responses(attributions)
    )
