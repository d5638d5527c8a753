"""filestore application configuration.

Loads settings from a single optional YAML file:
  * filestore.settings.yaml: server, logging and storage settings

When the file is missing every section falls back to its defaults, which
reproduce the stock layout: port 8080, uploads under ./data and static
assets under ./public.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("filestore.settings.yaml")

# 10 MiB, the multipart in-memory buffer limit.
DEFAULT_MAX_MEMORY_BYTES = 10 << 20


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _resolve_dir(value: str, base_dir: Path) -> str:
    path = Path(value).expanduser()
    if path.is_absolute():
        return str(path)
    return str(base_dir / path)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)


LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


class LoggingSettings(BaseModel):
    level: str = "info"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return value


class StorageSettings(BaseModel):
    """Where uploads are stored and static assets are served from."""
    data_dir:         str = "data"
    public_dir:       str = "public"
    max_memory_bytes: int = Field(DEFAULT_MAX_MEMORY_BYTES, gt=0)


class AppConfig(BaseModel):
    server:  ServerSettings  = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(settings_path: Optional[Union[str, Path]] = None) -> AppConfig:
    """Load and validate settings into an *AppConfig*.

    Relative storage directories are resolved against the directory that
    holds the settings file when ``settings_path`` is given explicitly, and
    left relative to the working directory otherwise.
    """
    path = Path(settings_path) if settings_path is not None else SETTINGS_FILE
    config = AppConfig(**_load_yaml(path))

    if settings_path is not None:
        base_dir = path.resolve().parent
        config.storage.data_dir = _resolve_dir(config.storage.data_dir, base_dir)
        config.storage.public_dir = _resolve_dir(config.storage.public_dir, base_dir)

    logger.info(
        "Settings loaded (server=%s:%s, data_dir=%s, public_dir=%s)",
        config.server.host,
        config.server.port,
        config.storage.data_dir,
        config.storage.public_dir,
    )
    return config


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration (for testing)."""
    global _config
    _config = None
