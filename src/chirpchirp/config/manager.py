"""Configuration loading from YAML and environment variables."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from chirpchirp.config.models import ChirpConfig

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "CHIRPCHIRP_CONFIG"
DEFAULT_PORT = 8080


class ConfigManager:
    """Loads the service configuration.

    Values come from an optional YAML file, then environment variables override
    them. Cloud deployments usually set only the environment.
    """

    # Environment variable name(s) -> dotted config key. Earlier names win.
    ENV_OVERRIDES: tuple[tuple[tuple[str, ...], str], ...] = (
        (("DATABASE_URL", "SUPABASE_URL"), "database.url"),
        (("DATABASE_KEY", "SUPABASE_ANON_KEY"), "database.credential"),
        (("DATABASE_CREATE_TABLES",), "database.create_tables"),
        (("HOST",), "host"),
        (("LOG_LEVEL",), "logging.level"),
        (("JSON_LOGS",), "logging.json_logs"),
    )

    def __init__(
        self,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        """Initialize ConfigManager.

        Args:
            config_path: Optional YAML file path. Defaults to $CHIRPCHIRP_CONFIG when set.
            environ: Environment mapping, defaults to os.environ.
        """
        self.environ = os.environ if environ is None else environ
        if config_path is None and self.environ.get(CONFIG_PATH_ENV):
            config_path = Path(self.environ[CONFIG_PATH_ENV])
        self.config_path = config_path

    def load(self) -> ChirpConfig:
        """Load configuration with environment overrides and validation.

        Returns:
            ChirpConfig: Loaded and validated configuration

        Raises:
            ValueError: If the merged configuration does not validate
        """
        raw_config = self._read_yaml()
        raw_config = self._apply_environment(raw_config)

        try:
            return ChirpConfig(**raw_config)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise ValueError(f"Configuration validation failed: {', '.join(errors)}") from e

    def _read_yaml(self) -> dict[str, Any]:
        """Read the YAML config file, if any.

        Returns:
            dict: Raw configuration dictionary (empty when no file is configured)
        """
        if self.config_path is None:
            return {}
        if not self.config_path.exists():
            logger.warning("Config file %s not found, using defaults", self.config_path)
            return {}
        return yaml.safe_load(self.config_path.read_text()) or {}

    def _apply_environment(self, raw_config: dict[str, Any]) -> dict[str, Any]:
        """Overlay environment variables onto the raw configuration."""
        for names, key in self.ENV_OVERRIDES:
            value = next((self.environ[n] for n in names if self.environ.get(n)), None)
            if value is not None:
                _set_dotted(raw_config, key, value)

        if "PORT" in self.environ:
            raw_config["port"] = parse_port(self.environ["PORT"])

        return raw_config


def parse_port(value: str | None) -> int:
    """Parse a PORT value, falling back to 8080 when unset or not a number."""
    if not value or not value.strip():
        return DEFAULT_PORT
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("Ignoring non-numeric PORT value %r", value)
        return DEFAULT_PORT


def _set_dotted(target: dict[str, Any], dotted_key: str, value: Any) -> None:  # noqa: ANN401
    """Set a nested dict value from a dotted key, creating sections as needed."""
    *sections, leaf = dotted_key.split(".")
    node = target
    for section in sections:
        node = node.setdefault(section, {})
    node[leaf] = value
