"""Configuration access for the web application."""

from pathlib import Path

from chirpchirp.config import ChirpConfig, ConfigManager


def get_config(config_path: Path | None = None) -> ChirpConfig:
    """Load ChirpChirp configuration.

    Uses ConfigManager, which reads the optional YAML file and applies
    environment variable overrides.

    Args:
        config_path: Optional YAML file path. Defaults to $CHIRPCHIRP_CONFIG.

    Returns:
        ChirpConfig: The loaded and validated configuration.
    """
    return ConfigManager(config_path).load()
