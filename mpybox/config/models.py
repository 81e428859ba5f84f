"""User configuration models."""

import os
import sys
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _xdg_data_home() -> Path:
    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "mpybox"
    return Path.home() / ".local" / "share" / "mpybox"


class UserConfigData(BaseSettings):
    """User configuration data model with automatic environment variable support.

    Precedence order (highest to lowest):
    1. Environment variables (highest)
    2. Constructor arguments (file data)
    3. .env file
    4. Default values (lowest)
    """

    model_config = SettingsConfigDict(
        env_prefix="MPYBOX_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment variables override file configuration."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )

    python_path: Path = Field(
        default_factory=lambda: Path(sys.executable),
        description="Python interpreter used to run obmpy, esptool and kflash",
    )
    firmware_dir: Path = Field(
        default_factory=lambda: _xdg_data_home() / "firmwares",
        description="Directory holding MicroPython firmware images",
    )
    project_dir: Path = Field(
        default_factory=lambda: _xdg_data_home() / "project",
        description="Directory where the program entry file is staged",
    )

    # Logging
    log_level: str = "WARNING"

    start_delay: float = Field(
        default=1,
        ge=0,
        description="Seconds the transfer tool waits for the board after opening the port",
    )
    process_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Kill external tools running longer than this (seconds); unset waits forever",
    )

    default_board: str = Field(
        default="esp32", description="Board preset used when none is given"
    )
    boards: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="User board presets, merged over the built-in ones",
    )

    @field_validator("python_path", "firmware_dir", "project_dir", mode="after")
    @classmethod
    def expand_paths(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v
