"""Board presets and board configuration loading."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mpybox.core.errors import ConfigError
from mpybox.core.structlog_logger import get_struct_logger
from mpybox.models.board import BoardConfig


logger = get_struct_logger(__name__)

# Baud may be a single value or keyed by sys.platform
BUILTIN_BOARDS: dict[str, dict[str, Any]] = {
    "esp32": {
        "chip": "esp32",
        "baud": 460800,
        "firmware": "esp32-micropython.bin",
    },
    "esp8266": {
        "chip": "esp8266",
        "baud": 460800,
        "firmware": "esp8266-micropython.bin",
    },
    "k210": {
        "chip": "k210",
        "baud": {"linux": 1500000, "win32": 1500000, "darwin": 115200},
        "board": "goE",
        "firmware": "k210-micropython.bin",
    },
}


def available_boards(
    user_boards: dict[str, dict[str, Any]] | None = None,
) -> dict[str, dict[str, Any]]:
    """Built-in presets with user presets merged over them by name."""
    boards = {name: dict(data) for name, data in BUILTIN_BOARDS.items()}
    for name, data in (user_boards or {}).items():
        boards[name] = {**boards.get(name, {}), **data}
    return boards


def load_board_file(path: str | Path) -> dict[str, Any]:
    """Read a board definition from a YAML file.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping
    """
    board_path = Path(path).expanduser()
    try:
        with board_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read board file {board_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Board file {board_path} must contain a mapping")
    return data


def create_board_config(
    name: str | None = None,
    board_file: str | Path | None = None,
    user_boards: dict[str, dict[str, Any]] | None = None,
    **overrides: Any,
) -> BoardConfig:
    """Build a BoardConfig from a preset or board file plus overrides.

    A board file takes precedence over a preset name. Overrides whose value
    is None are ignored, so CLI options can be passed straight through.

    Raises:
        ConfigError: If the preset is unknown or the result is invalid
        UnknownChipFamilyError: If the chip family is not supported
    """
    if board_file is not None:
        data = load_board_file(board_file)
        source = str(board_file)
    elif name is not None:
        boards = available_boards(user_boards)
        if name not in boards:
            raise ConfigError(
                f"Unknown board preset '{name}' (available: {', '.join(sorted(boards))})"
            )
        data = boards[name]
        source = f"preset:{name}"
    else:
        data = {}
        source = "overrides"

    data = {**data, **{k: v for k, v in overrides.items() if v is not None}}

    try:
        board = BoardConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid board configuration ({source}): {e}") from e

    logger.debug("board_config_created", source=source, chip=board.chip.value)
    return board
