"""Application factory for creating FastAPI application with dependency injection."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chirpchirp import __version__
from chirpchirp.web.core.container import Container
from chirpchirp.web.core.lifespan import lifespan
from chirpchirp.web.middleware.request_logging import StructuredRequestLoggingMiddleware
from chirpchirp.web.routers import health_api_routes, images_api_routes, species_api_routes


def create_app(container: Container | None = None) -> FastAPI:
    """Create FastAPI application with dependency injection.

    Args:
        container: Optional pre-configured container, used by tests to
            override providers before the app is wired.

    Returns:
        FastAPI: The configured application instance.
    """
    container = container or Container()

    app = FastAPI(
        lifespan=lifespan,
        title="ChirpChirp Core API",
        description="Wildlife camera images and their species attributions",
        version=__version__,
    )
    app.container = container  # type: ignore[attr-defined]

    # Read-only API consumed by browser clients on other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # nosemgrep
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredRequestLoggingMiddleware)

    container.wire(
        modules=[
            "chirpchirp.web.routers.health_api_routes",
            "chirpchirp.web.routers.images_api_routes",
            "chirpchirp.web.routers.species_api_routes",
        ]
    )

    app.include_router(health_api_routes.router, tags=["Health Check API"])
    app.include_router(images_api_routes.router, tags=["Images API"])
    app.include_router(species_api_routes.router, tags=["Species API"])

    return app
