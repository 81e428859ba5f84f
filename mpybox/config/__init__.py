"""Configuration package for mpybox."""

from .boards import (
    BUILTIN_BOARDS,
    available_boards,
    create_board_config,
    load_board_file,
)
from .models import UserConfigData
from .user_config import UserConfig, create_user_config


__all__ = [
    "BUILTIN_BOARDS",
    "available_boards",
    "create_board_config",
    "load_board_file",
    "UserConfigData",
    "UserConfig",
    "create_user_config",
]
