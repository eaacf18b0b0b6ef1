"""Configuration loading for scolarite deployments."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "scolarite.yaml"

# Environment variable -> Settings attribute
ENV_OVERRIDES = {
    "SCOLARITE_DB_PATH": "database_path",
    "SCOLARITE_LOG_DIR": "log_dir",
    "SCOLARITE_LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class Settings:
    """Runtime settings of a scolarite deployment."""

    database_path: str = "scolarite.db"
    log_dir: str = "logs"
    log_level: str = "INFO"
    log_console: bool = True
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    default_admin_username: str = "admin"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary.

        Raises:
            ConfigError: If the dictionary holds keys Settings doesn't know.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        cors_origins = data.get("cors_origins", ["*"])
        if isinstance(cors_origins, str):
            cors_origins = [cors_origins]

        defaults = cls()
        return cls(
            database_path=str(data.get("database_path", defaults.database_path)),
            log_dir=str(data.get("log_dir", defaults.log_dir)),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
            log_console=bool(data.get("log_console", defaults.log_console)),
            cors_origins=list(cors_origins),
            default_admin_username=str(
                data.get("default_admin_username", defaults.default_admin_username)
            ),
        )


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from an optional YAML file, then apply environment overrides.

    Args:
        config_path: Path to a YAML file. When None, ``scolarite.yaml`` in the
            current directory is read if it exists.

    Returns:
        Parsed settings.

    Raises:
        ConfigError: If an explicitly given file doesn't exist, or the file is
            invalid YAML, not a mapping, or holds unknown keys.
    """
    data: dict[str, Any] = {}

    if config_path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_FILE
        path = candidate if candidate.exists() else None
    else:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

    if path is not None:
        try:
            with open(path) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ConfigError(
                    f"Configuration must be a YAML mapping, got {type(loaded).__name__}"
                )
            data = loaded

    for env_var, attribute in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[attribute] = value

    return Settings.from_dict(data)
