"""Dependency injection container for the ChirpChirp application."""

from dependency_injector import containers, providers

from chirpchirp.database.core import CoreDatabaseService
from chirpchirp.images.listing import ImageListingService
from chirpchirp.images.queries import ImageQueryService
from chirpchirp.web.core.config import get_config


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    The database service is the only process-wide state; query and listing
    services are cheap and created per use.
    """

    # Configuration - singleton loaded once at startup
    config = providers.Singleton(get_config)

    core_database = providers.Singleton(
        CoreDatabaseService,
        url=providers.Factory(lambda c: c.database.url, c=config),
        credential=providers.Factory(lambda c: c.database.credential, c=config),
        echo=providers.Factory(lambda c: c.database.echo, c=config),
        pool_pre_ping=providers.Factory(lambda c: c.database.pool_pre_ping, c=config),
    )

    image_query_service = providers.Factory(
        ImageQueryService,
        core_database=core_database,
    )

    image_listing_service = providers.Factory(
        ImageListingService,
        query_service=image_query_service,
        default_page=providers.Factory(lambda c: c.default_page, c=config),
        default_limit=providers.Factory(lambda c: c.default_page_size, c=config),
    )
