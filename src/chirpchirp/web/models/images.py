"""Image-related API contract models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chirpchirp.images.composition import Pagination, SpeciesCount
from chirpchirp.images.models import AttributionBase, ImageBase, ImageWithAttributions

# ==================== Common Response Components ====================


class AttributionResponse(BaseModel):
    """A species identification attached to an image."""

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    image_id: str
    model_version: str
    species: str | None = None
    confidence: float
    extra: dict[str, Any] | None = None


class ImageResponse(BaseModel):
    """An image record with its attributions."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    taken_on: datetime
    stored_on: datetime
    file_name: str
    local_file_name: str | None = None
    image_size: int | None = None
    image_url: str | None = None
    download_url: str | None = None
    enhanced_image_url: str | None = None
    camera_id: str | None = None
    camera_name: str | None = None
    modem_meid: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_video: bool = False
    video_url: str | None = None
    user_id: str | None = None
    is_favorite: bool = False
    temperature: float | None = None
    moon_phase: str | None = None
    tags: list[str] | None = None
    attributions: list[AttributionResponse] = Field(default_factory=list)

    @classmethod
    def from_image(cls, image: ImageWithAttributions) -> "ImageResponse":
        """Build the response for an enriched image."""
        return cls(
            **_image_fields(image),
            attributions=attribution_responses(image.attributions),
        )


class PaginationInfo(BaseModel):
    """Pagination metadata for image listings."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Images per page")
    total: int = Field(..., description="Images in the time window, before species filtering")
    total_pages: int = Field(..., alias="totalPages", description="Total number of pages")

    @classmethod
    def from_pagination(cls, pagination: Pagination) -> "PaginationInfo":
        """Convert listing pagination metadata."""
        return cls(
            page=pagination.page,
            limit=pagination.limit,
            total=pagination.total,
            total_pages=pagination.total_pages,
        )


class ImageFilters(BaseModel):
    """Filters applied to an image listing."""

    model_config = ConfigDict(populate_by_name=True)

    time_range: str = Field(..., alias="timeRange", description="Applied time range token")
    species: str | None = Field(None, description="Exact species filter, if any")


class SpeciesCountItem(BaseModel):
    """Species label with its attribution count."""

    species: str
    count: int

    @classmethod
    def from_count(cls, count: SpeciesCount) -> "SpeciesCountItem":
        """Convert an aggregated species count."""
        return cls(species=count.species, count=count.count)


# ==================== Response Models ====================


class PaginatedImagesResponse(BaseModel):
    """Response for the paginated image listing."""

    images: list[ImageResponse] = Field(..., description="Images with attributions")
    pagination: PaginationInfo = Field(..., description="Pagination metadata")
    filters: ImageFilters = Field(..., description="Filters applied")


class ImageAttributionsResponse(BaseModel):
    """Response for an image's attributions."""

    image_id: str
    attributions: list[AttributionResponse] = Field(
        ..., description="Attributions, highest confidence first"
    )


class ImageNotFoundResponse(BaseModel):
    """Structured not-found payload for single image lookups."""

    error: str = "Image not found"
    status: int = 404


class SpeciesSummaryResponse(BaseModel):
    """Response for the species summary."""

    species: list[SpeciesCountItem] = Field(..., description="Species, most frequent first")


def _image_fields(image: ImageBase) -> dict[str, Any]:
    """Extract the stored image columns."""
    return {name: getattr(image, name) for name in ImageBase.model_fields}


def attribution_responses(attributions: list[AttributionBase]) -> list[AttributionResponse]:
    """Convert stored attributions to response models."""
    return [AttributionResponse.model_validate(a) for a in attributions]
