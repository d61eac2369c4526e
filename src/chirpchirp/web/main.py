"""ChirpChirp web application entry point for ASGI servers."""

import logging

from chirpchirp.utils.structlog_configurator import configure_structlog
from chirpchirp.web.core.container import Container
from chirpchirp.web.core.factory import create_app

container = Container()

# Configure logging before anything else imports and creates loggers
configure_structlog(container.config())

# Disable uvicorn access logger since we have our own structured logging middleware
logging.getLogger("uvicorn.access").disabled = True

app = create_app(container)
