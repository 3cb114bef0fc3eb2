"""Configuration management for the CLI."""

import os
from pathlib import Path
from typing import Any

import yaml

from bibexport.core.config import ExportConfig
from bibexport.core.exceptions import ConfigurationError

# Keys that configure the command line tool rather than the encoder
CLI_KEYS = ("workers", "cache_file", "output")


class Config:
    """Configuration management for the CLI application."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading config file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "bibexport" / "config.yaml")

        # Project config
        paths.append(Path(".bibexport.yaml"))
        paths.append(Path("bibexport.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def get_config_paths() -> list[Path]:
    """Get configuration paths in precedence order."""
    return Config.get_config_paths()


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Default locations are merged first (last one wins), then environment
    overrides, then the explicitly given file.
    """
    config: dict[str, Any] = {}

    for default_path in get_config_paths():
        if default_path.exists():
            config = Config.merge_configs(config, Config.from_file(default_path))

    env_overrides: dict[str, Any] = {}
    if dialect := os.environ.get("BIBEXPORT_DIALECT"):
        env_overrides["dialect"] = dialect.lower()
    if testing := os.environ.get("BIBEXPORT_TESTING"):
        env_overrides["testing"] = testing.lower() in ("1", "true", "yes", "on")
    config = Config.merge_configs(config, env_overrides)

    if path is not None:
        config = Config.merge_configs(config, Config.from_file(path))

    return config


def build_export_config(
    data: dict[str, Any], **overrides: Any
) -> tuple[ExportConfig, dict[str, Any]]:
    """Split loaded configuration into encoder switches and CLI settings.

    ``overrides`` with a value of None are ignored, so unset command
    line flags keep the configured value.

    Raises:
        ConfigurationError: If an encoder switch is unknown or invalid.
    """
    data = dict(data)
    settings = {key: data.pop(key) for key in CLI_KEYS if key in data}
    data.update({key: value for key, value in overrides.items() if value is not None})
    return ExportConfig.from_dict(data), settings


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
