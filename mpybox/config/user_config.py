"""
User configuration management for mpybox.

This module handles user-specific configuration settings with multiple sources:
1. Environment variables (highest precedence)
2. Command-line provided config file
3. Config file in current directory
4. User's XDG config directory
5. Default values (lowest precedence)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mpybox.config.models import UserConfigData
from mpybox.core.errors import ConfigError
from mpybox.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)

# Environment variable prefixes
ENV_PREFIX = "MPYBOX_"


class UserConfig:
    """
    Manages user-specific configuration for mpybox using Pydantic Settings.

    The first config file found on the search path is loaded; environment
    variables are applied on top by Pydantic Settings.
    """

    def __init__(self, cli_config_path: str | Path | None = None):
        """
        Initialize the user configuration handler.

        Args:
            cli_config_path: Optional config file path provided via CLI

        Raises:
            ConfigError: If the config file cannot be read or is invalid
        """
        self._config_sources: dict[str, str] = {}
        self._main_config_path: Path | None = None
        self._config_paths = self._generate_config_paths(cli_config_path)
        self._load_config()

    def _generate_config_paths(self, cli_config_path: str | Path | None) -> list[Path]:
        """Generate a list of config paths to search in order of precedence."""
        config_paths = []

        if cli_config_path:
            cli_path = Path(cli_config_path).expanduser().resolve()
            if not cli_path.is_file():
                raise ConfigError(f"Config file not found: {cli_path}")
            config_paths.append(cli_path)

        config_paths.extend([Path.cwd() / "mpybox.yaml", Path.cwd() / ".mpybox.yml"])

        xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
        config_home = (
            Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
        )
        config_paths.extend(
            [config_home / "mpybox" / "config.yaml", config_home / "mpybox" / "config.yml"]
        )

        return config_paths

    def _read_config_file(self, path: Path) -> dict[str, Any]:
        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def _load_config(self) -> None:
        """Load configuration from the first config file found and the environment."""
        logger.debug(
            "config_search_paths", paths=[str(p) for p in self._config_paths]
        )

        config_data: dict[str, Any] = {}
        found_path: Path | None = None
        for path in self._config_paths:
            if path.is_file():
                config_data = self._read_config_file(path)
                found_path = path
                break

        try:
            self._config = UserConfigData(**config_data)
        except ValidationError as e:
            source = found_path or "environment"
            raise ConfigError(f"Invalid configuration in {source}: {e}") from e

        if found_path:
            logger.debug("config_loaded", path=str(found_path))
            self._main_config_path = found_path
            self._track_file_sources(config_data, found_path.name)
        else:
            logger.debug("config_defaults_used")
            self._main_config_path = self._config_paths[-2]

        self._track_env_var_sources()

        if logging.getLogger().isEnabledFor(logging.DEBUG):
            for key in ("python_path", "firmware_dir", "project_dir", "default_board"):
                logger.debug(
                    "config_value",
                    key=key,
                    value=str(getattr(self._config, key)),
                    source=self.get_source(key),
                )

    def _track_file_sources(
        self, data: dict[str, Any], filename: str, prefix: str = ""
    ) -> None:
        """Recursively track sources for file-based configuration values."""
        for key, value in data.items():
            current_key = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict):
                self._track_file_sources(value, filename, current_key)
            else:
                self._config_sources[current_key] = f"file:{filename}"

    def _track_env_var_sources(self) -> None:
        """Track which configuration values came from environment variables."""
        for env_name in os.environ:
            if not env_name.upper().startswith(ENV_PREFIX):
                continue
            config_key = env_name[len(ENV_PREFIX) :].lower().replace("__", ".")
            if config_key.split(".")[0] in UserConfigData.model_fields:
                self._config_sources[config_key] = "environment"

    @property
    def config(self) -> UserConfigData:
        return self._config

    @property
    def config_path(self) -> Path | None:
        """File the configuration was loaded from, or where it would be saved."""
        return self._main_config_path

    def get_source(self, key: str) -> str:
        """
        Get the source of a configuration value.

        Returns:
            The source of the value (environment, file:name, runtime, default)
        """
        return self._config_sources.get(key, "default")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value, or ``default`` for unknown keys."""
        if key in UserConfigData.model_fields:
            return getattr(self._config, key)
        return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a top-level configuration value for this session.

        Raises:
            ValueError: If the key is unknown or the value invalid
        """
        if key not in UserConfigData.model_fields:
            logger.warning("config_key_unknown", key=key)
            raise ValueError(f"Unknown configuration key: {key}")
        try:
            setattr(self._config, key, value)
        except ValidationError as e:
            raise ValueError(f"Invalid value for {key}: {e}") from e
        self._config_sources[key] = "runtime"

    def get_log_level_int(self) -> int:
        """Get the log level as an integer value for use with logging module."""
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return level_map.get(self._config.log_level.upper(), logging.WARNING)


def create_user_config(cli_config_path: str | Path | None = None) -> UserConfig:
    """
    Create a UserConfig instance.

    Args:
        cli_config_path: Optional config file path provided via CLI

    Returns:
        Configured UserConfig instance
    """
    return UserConfig(cli_config_path=cli_config_path)
