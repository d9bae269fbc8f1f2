"""
Configuration
-------------
Optional YAML settings with environment variable overrides.

Lookup order for a key: SSHPICK_<KEY> environment variable, then the
config file, then the caller's default. Command-line flags are applied
on top by main.py.

Example sshpick.yaml:

    registry:
      path: ~/.config/sshpick/dir.txt
    logging:
      level: INFO
      dir: ~/.cache/sshpick
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import os

import yaml


ENV_PREFIX = "SSHPICK_"
DEFAULT_CONFIG_FILE = "sshpick.yaml"


class ConfigError(Exception):
    """Config file exists but cannot be used."""
    pass


class ConfigManager:
    """
    Centralized configuration management.
    Loads configuration from YAML with environment variable overrides.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self._config_path = Path(config_path) if config_path else None
        self._config: Dict[str, Any] = {}
        self._logger = logging.getLogger("sshpick.config")

        self._load_config()

    @property
    def path(self) -> Optional[Path]:
        return self._config_path

    def _load_config(self) -> None:
        """Load configuration from file. A missing file means defaults."""
        if self._config_path is None or not self._config_path.exists():
            self._logger.debug(f"No config file at {self._config_path}, using defaults")
            return

        try:
            with open(self._config_path, 'r', encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {self._config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self._config_path} must contain a mapping")

        self._config = data
        self._logger.debug(f"Loaded config from {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Supports dot notation: 'section.key'
        Environment variables override file config.
        """
        env_value = self._env(key)
        if env_value is not None:
            return env_value

        parts = key.split('.')
        value: Any = self._config

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def get_path(self, key: str, default: Optional[Path] = None) -> Optional[Path]:
        """
        Get a value as a path, expanding '~'.

        Relative paths from the config file resolve against the file's
        directory; relative paths from the environment stay as given.
        """
        env_value = self._env(key)
        if env_value:
            return Path(env_value).expanduser()

        value = self.get(key)
        if value in (None, ""):
            return default

        path = Path(str(value)).expanduser()
        if not path.is_absolute() and self._config_path is not None:
            path = self._config_path.parent / path
        return path

    @staticmethod
    def _env(key: str) -> Optional[str]:
        return os.getenv(f"{ENV_PREFIX}{key.upper().replace('.', '_')}")
