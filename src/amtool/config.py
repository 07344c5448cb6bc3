"""CLI configuration management.

Handles persistent CLI configuration stored in ~/.config/amtool/config.yml.
Supports environment variable overrides and CLI flag precedence.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

# Default values
DEFAULT_URL = ""
DEFAULT_TIMEOUT = 30
DEFAULT_OUTPUT = "simple"

OUTPUT_FORMATS = ["simple", "extended", "json"]

# Config file keys use the flag spelling
FILE_KEYS = {
    "alertmanager_url": "alertmanager.url",
    "timeout": "timeout",
    "output": "output",
}

# Environment variable mappings
ENV_VARS = {
    "alertmanager_url": "ALERTMANAGER_URL",
    "timeout": "AMTOOL_TIMEOUT",
    "output": "AMTOOL_OUTPUT",
}


@dataclass
class CLIConfig:
    """CLI configuration."""

    alertmanager_url: str = DEFAULT_URL
    timeout: int = DEFAULT_TIMEOUT
    output: str = DEFAULT_OUTPUT

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    def set(self, key: str, value: Any, source: str) -> None:
        """Set a value, coercing and validating it, and record its source."""
        if key == "timeout":
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ConfigError(f"invalid timeout {value!r} from {source}: expected seconds")
            if value <= 0:
                raise ConfigError(f"invalid timeout {value} from {source}: must be positive")
        elif key == "output":
            value = str(value)
            if value not in OUTPUT_FORMATS:
                raise ConfigError(
                    f"invalid output format {value!r} from {source}: "
                    f"expected one of {', '.join(OUTPUT_FORMATS)}"
                )
        else:
            value = str(value)
        setattr(self, key, value)
        self._sources[key] = source

    def as_dict(self) -> dict[str, Any]:
        """Config values keyed by their file spelling."""
        return {FILE_KEYS[key]: getattr(self, key) for key in FILE_KEYS}


def get_config_path() -> Path:
    """Get the CLI config file path.

    Returns:
        Path to ~/.config/amtool/config.yml
    """
    return Path.home() / ".config" / "amtool" / "config.yml"


def load_config(overrides: dict[str, Any] | None = None) -> CLIConfig:
    """Load CLI configuration.

    Precedence (highest to lowest):
    1. CLI flags (``overrides``; ``None`` values are ignored)
    2. Environment variables
    3. Config file (~/.config/amtool/config.yml)
    4. Defaults

    Args:
        overrides: Values given as command-line flags

    Returns:
        CLIConfig with values and sources

    Raises:
        ConfigError: If the config file is unreadable or a value is invalid
    """
    config = CLIConfig()

    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"reading config file {config_path}: {e}")
        if not isinstance(file_config, dict):
            raise ConfigError(f"config file {config_path} must contain a mapping")

        for key, file_key in FILE_KEYS.items():
            if file_key in file_config:
                config.set(key, file_config[file_key], "config file")

    for key, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            config.set(key, os.environ[env_var], "environment")

    for key, value in (overrides or {}).items():
        if value is not None:
            config.set(key, value, "flag")

    return config
