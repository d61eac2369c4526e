"""Species summary endpoint."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from chirpchirp.images.listing import ImageListingService
from chirpchirp.web.core.container import Container
from chirpchirp.web.models.images import SpeciesCountItem, SpeciesSummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/species")


@router.get("", response_model=SpeciesSummaryResponse)
@inject
async def list_species(
    listing_service: Annotated[
        ImageListingService, Depends(Provide[Container.image_listing_service])
    ],
) -> SpeciesSummaryResponse:
    """Count attributions per species label across all images, most frequent first.

    Blank labels are left out. The summary is not paginated.
    """
    try:
        counts = await listing_service.summarize_species()
    except SQLAlchemyError as e:
        logger.error("Error summarizing species: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to summarize species",
        ) from e

    return SpeciesSummaryResponse(species=[SpeciesCountItem.from_count(c) for c in counts])
