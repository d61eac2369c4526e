from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from dependency_injector import providers

from chirpchirp.config.models import ChirpConfig, DatabaseConfig
from chirpchirp.database.core import CoreDatabaseService
from chirpchirp.images.models import Attribution, Image
from chirpchirp.web.core.container import Container
from chirpchirp.web.core.factory import create_app

# Reference "now" for time window tests: 2025-07-01 12:00 UTC
NOW = datetime(2025, 7, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used by time window tests."""
    return NOW


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite database file isolated per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'chirpchirp-test.db'}"


@pytest.fixture
def test_config(database_url: str) -> ChirpConfig:
    """Configuration pointing at the per-test database."""
    return ChirpConfig(database=DatabaseConfig(url=database_url))


@pytest.fixture
def model_factory():
    """Create a factory for test model instances with sensible defaults."""

    class ModelFactory:
        """Factory class for creating test model instances."""

        @staticmethod
        def create_image(image_id: str, taken_on: datetime, **kwargs: Any) -> Image:
            """Create an Image instance."""
            defaults = {
                "id": image_id,
                "taken_on": taken_on,
                "stored_on": taken_on + timedelta(minutes=5),
                "file_name": f"{image_id}.jpg",
                "image_url": f"https://images.example.test/{image_id}.jpg",
                "camera_id": "cam-1",
                "camera_name": "Back Fence",
                "latitude": 44.97,
                "longitude": -93.26,
                "is_video": False,
                "is_favorite": False,
                "temperature": 18.5,
                "moon_phase": "waxing gibbous",
                "tags": ["trail"],
            }
            defaults.update(kwargs)
            return Image(**defaults)

        @staticmethod
        def create_attribution(
            image_id: str, species: str | None, confidence: float = 0.5, **kwargs: Any
        ) -> Attribution:
            """Create an Attribution instance."""
            defaults = {
                "image_id": image_id,
                "species": species,
                "confidence": confidence,
                "model_version": "speciesnet-v4",
                "extra": None,
            }
            defaults.update(kwargs)
            return Attribution(**defaults)

    return ModelFactory()


@pytest.fixture
def sample_rows(model_factory, now) -> tuple[list[Image], list[Attribution]]:
    """Images spanning every time range, with valid, blank and missing attributions.

    Newest first:
        img-recent  6 hours ago   Blue Jay 0.9, Northern Cardinal 0.4
        img-week    4 days ago    blank and whitespace species only
        img-month   21 days ago   Blue Jay 0.7 (v3), Blue Jay 0.8
        img-quarter 72 days ago   White-tailed Deer 0.95, missing species 0.1
        img-year    273 days ago  no attributions
        img-old     2023-01-01    Raccoon 0.6, "blue jay" 0.3
    """
    f = model_factory
    images = [
        f.create_image("img-recent", now - timedelta(hours=6)),
        f.create_image("img-week", now - timedelta(days=4)),
        f.create_image("img-month", now - timedelta(days=21)),
        f.create_image("img-quarter", now - timedelta(days=72), is_video=True),
        f.create_image("img-year", now - timedelta(days=273)),
        f.create_image("img-old", datetime(2023, 1, 1, tzinfo=UTC)),
    ]
    attributions = [
        f.create_attribution("img-recent", "Blue Jay", 0.9),
        f.create_attribution("img-recent", "Northern Cardinal", 0.4),
        f.create_attribution("img-week", "", 0.2),
        f.create_attribution("img-week", "   ", 0.3, model_version="speciesnet-v3"),
        f.create_attribution("img-month", "Blue Jay", 0.7, model_version="speciesnet-v3"),
        f.create_attribution("img-month", "Blue Jay", 0.8),
        f.create_attribution("img-quarter", "White-tailed Deer", 0.95, extra={"bbox": [1, 2]}),
        f.create_attribution("img-quarter", None, 0.1, model_version="speciesnet-v3"),
        f.create_attribution("img-old", "Raccoon", 0.6),
        f.create_attribution("img-old", "blue jay", 0.3),
    ]
    return images, attributions


@pytest.fixture
async def core_database(database_url: str):
    """Provide an initialized CoreDatabaseService on an empty per-test database."""
    service = CoreDatabaseService(database_url)
    await service.initialize()
    try:
        yield service
    finally:
        # Dispose to prevent file descriptor leaks
        await service.dispose()


@pytest.fixture
async def populated_database(core_database: CoreDatabaseService, sample_rows):
    """CoreDatabaseService seeded with the sample images and attributions."""
    images, attributions = sample_rows
    async with core_database.get_async_db() as session:
        session.add_all(images)
        await session.flush()
        session.add_all(attributions)
        await session.commit()
    return core_database


@pytest.fixture
def container(test_config: ChirpConfig):
    """Container with the test configuration, reset after the test."""
    container = Container()
    container.config.override(providers.Object(test_config))
    try:
        yield container
    finally:
        container.unwire()
        container.reset_override()


@pytest.fixture
def app_with_database(container: Container, populated_database: CoreDatabaseService):
    """FastAPI app whose container uses the seeded test database."""
    container.core_database.override(providers.Object(populated_database))
    return create_app(container)
