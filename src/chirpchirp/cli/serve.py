"""Command-line entry point that runs the ChirpChirp API under uvicorn."""

import os
from pathlib import Path

import click
import uvicorn

from chirpchirp.config import ConfigManager
from chirpchirp.config.manager import CONFIG_PATH_ENV
from chirpchirp.utils.structlog_configurator import configure_structlog


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file (defaults to $CHIRPCHIRP_CONFIG).",
)
@click.option("--host", default=None, help="Override the configured listen address.")
@click.option("--port", type=int, default=None, help="Override the configured port ($PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes (development only).")
def main(config_path: Path | None, host: str | None, port: int | None, reload: bool) -> None:
    """Serve the ChirpChirp core API."""
    try:
        config = ConfigManager(config_path).load()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    configure_structlog(config)

    # The ASGI app loads its own config in the server process
    if config_path is not None:
        os.environ[CONFIG_PATH_ENV] = str(config_path)

    bind_host = host or config.host
    bind_port = port or config.port
    click.echo(f"ChirpChirp is running at {bind_host}:{bind_port}")

    uvicorn.run(
        "chirpchirp.web.main:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        access_log=False,
        log_config=None,  # Keep the structlog handlers configured above
    )


if __name__ == "__main__":
    main()
