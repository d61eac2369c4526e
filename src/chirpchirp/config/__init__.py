"""ChirpChirp configuration package.

This package provides centralized configuration management with:
- Typed Pydantic models with validation
- YAML file loading
- Environment variable overrides for container deployments
"""

from .manager import ConfigManager
from .models import ChirpConfig

__all__ = [
    "ChirpConfig",
    "ConfigManager",
]
