"""Database models for the images domain."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Index, UniqueConstraint
from sqlmodel import Field, SQLModel

from chirpchirp.database.model_utils import UTCDateTime


class ImageBase(SQLModel):
    """Base class for image models without relationships."""

    id: str = Field(primary_key=True)

    # Capture and ingestion times
    taken_on: datetime = Field(sa_type=UTCDateTime, index=True)
    stored_on: datetime = Field(default_factory=lambda: datetime.now(UTC), sa_type=UTCDateTime)

    # File and location metadata
    file_name: str
    local_file_name: str | None = None
    image_size: int | None = None
    image_url: str | None = None
    download_url: str | None = None
    enhanced_image_url: str | None = None

    # Camera that captured the image
    camera_id: str | None = None
    camera_name: str | None = None
    modem_meid: str | None = None

    latitude: float | None = None
    longitude: float | None = None

    is_video: bool = False
    video_url: str | None = None

    user_id: str | None = None
    is_favorite: bool = False

    # Environmental metadata
    temperature: float | None = None
    moon_phase: str | None = None

    tags: list[str] | None = Field(default=None, sa_type=JSON)


class Image(ImageBase, table=True):
    """A wildlife camera image. Read-only to this service."""

    __tablename__: str = "images"  # type: ignore[assignment]

    __table_args__ = (Index("idx_images_taken_on_id", "taken_on", "id"),)


class AttributionBase(SQLModel):
    """Base class for attribution models without the surrogate key."""

    image_id: str = Field(foreign_key="images.id", index=True)
    model_version: str
    species: str | None = None  # Blank or missing means the model made no identification
    confidence: float = Field(ge=0.0, le=1.0)
    extra: dict[str, Any] | None = Field(default=None, sa_type=JSON)


class Attribution(AttributionBase, table=True):
    """A machine-generated species identification for one image."""

    __tablename__: str = "attributions"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)

    __table_args__ = (
        UniqueConstraint(
            "image_id", "species", "model_version", name="uq_attributions_image_species_model"
        ),
        Index("idx_attributions_image_confidence", "image_id", "confidence"),
    )


class ImageWithAttributions(ImageBase):
    """Image joined with its attribution records.

    This is a non-table model built per request and never persisted.
    """

    attributions: list[AttributionBase] = Field(default_factory=list)

    @classmethod
    def from_image(
        cls, image: ImageBase, attributions: list[AttributionBase]
    ) -> ImageWithAttributions:
        """Build the enriched view of a stored image."""
        return cls(**image.model_dump(), attributions=list(attributions))
