"""Structlog-based logging configuration for ChirpChirp.

Modules log through ``logging.getLogger(__name__)``. Their records and any
structlog loggers share one processor chain and one stdout handler, rendered
as JSON lines in containers (Cloud Run, Docker) and as console output
elsewhere.
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from chirpchirp import __version__
from chirpchirp.config.models import ChirpConfig


def is_container_environment() -> bool:
    """Check if running in a container."""
    if os.path.exists("/.dockerenv"):
        return True
    # K_SERVICE is set by Cloud Run
    return os.environ.get("DOCKER_CONTAINER") == "true" or "K_SERVICE" in os.environ


def get_deployment_environment() -> str:
    """Name the deployment target: container, development or unknown."""
    if is_container_environment():
        return "container"
    if os.environ.get("CHIRPCHIRP_ENV") == "development":
        return "development"
    return "unknown"


def _add_static_context(fields: dict[str, str]) -> Processor:
    """Build a processor that stamps fixed fields onto every event."""

    def add_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.update(fields)
        return event_dict

    return add_fields


def _use_json(config: ChirpConfig) -> bool:
    """JSON output when configured, otherwise whenever running in a container."""
    if config.logging.json_logs is None:
        return is_container_environment()
    return config.logging.json_logs


def _shared_processors(config: ChirpConfig) -> list[Processor]:
    """Processors applied to both structlog events and stdlib records."""
    static_fields: dict[str, Any] = {
        "service": config.service_name,
        "version": __version__,
        "deployment": get_deployment_environment(),
    }
    static_fields.update(config.logging.extra_fields)

    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_static_context(static_fields),
    ]
    if config.logging.include_caller:
        chain.append(
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.PATHNAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            )
        )
    return chain


def _renderer(config: ChirpConfig) -> Processor:
    """Pick the final renderer."""
    if _use_json(config):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _configure_handlers(config: ChirpConfig, shared: list[Processor]) -> None:
    """Replace root handlers with one stdout handler rendered by structlog."""
    level = logging.getLevelName(config.logging.level)

    formatter = structlog.stdlib.ProcessorFormatter(
        # stdlib records get the shared chain plus their ``extra=`` fields
        foreign_pre_chain=[*shared, structlog.stdlib.ExtraAdder()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(config),
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def configure_structlog(config: ChirpConfig) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        config: Loaded configuration; only ``service_name`` and the
            ``logging`` section are used.
    """
    shared = _shared_processors(config)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configure_handlers(config, shared)

    logging.getLogger(__name__).info(
        "Logging configured (level=%s, json=%s, deployment=%s)",
        config.logging.level,
        _use_json(config),
        get_deployment_environment(),
    )
