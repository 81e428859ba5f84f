"""Common CLI parameter definitions for reuse across commands."""

from pathlib import Path
from typing import Annotated

import typer

from mpybox.config.boards import BUILTIN_BOARDS


def complete_board_names(incomplete: str) -> list[str]:
    """Tab completion for built-in board presets."""
    return [name for name in sorted(BUILTIN_BOARDS) if name.startswith(incomplete)]


PortOption = Annotated[
    str,
    typer.Option(
        "--port",
        "-p",
        help="Serial port the board is attached to (e.g. /dev/ttyUSB0, COM3)",
    ),
]

BoardOption = Annotated[
    str | None,
    typer.Option(
        "--board",
        "-b",
        help="Board preset to use. Uses the configured default_board if not specified.",
        autocompletion=complete_board_names,
    ),
]

BoardFileOption = Annotated[
    Path | None,
    typer.Option(
        "--board-file",
        help="YAML file describing the board (overrides --board)",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]

ChipOption = Annotated[
    str | None,
    typer.Option("--chip", help="Override the chip family (esp32, esp8266, k210)"),
]

BaudOption = Annotated[
    int | None,
    typer.Option("--baud", help="Override the flashing baud rate", min=1),
]

NoRtsDtrOption = Annotated[
    bool,
    typer.Option("--no-rtsdtr", help="Do not toggle RTS/DTR when opening the port"),
]
