"""Startup and shutdown of the store connection."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the process-wide database service and release it on shutdown.

    Tables are only created when ``database.create_tables`` is set; the
    production store is owned by the ingestion side.
    """
    config = app.container.config()  # type: ignore[attr-defined]
    database = app.container.core_database()  # type: ignore[attr-defined]

    masked_url = database.db_url.render_as_string(hide_password=True)
    logger.info("%s starting, store at %s", config.service_name, masked_url)
    if config.database.create_tables:
        await database.initialize()

    try:
        yield
    finally:
        await database.dispose()
        logger.info("%s stopped", config.service_name)
