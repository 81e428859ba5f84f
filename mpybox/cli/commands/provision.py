"""Provision command implementation."""

from pathlib import Path
from typing import Annotated

import typer

from mpybox.cli.decorators import handle_errors
from mpybox.cli.helpers import print_result
from mpybox.cli.helpers.board import get_provision_service, resolve_board_config
from mpybox.cli.helpers.parameters import (
    BaudOption,
    BoardFileOption,
    BoardOption,
    ChipOption,
    NoRtsDtrOption,
    PortOption,
)
from mpybox.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)


@handle_errors
def provision(
    ctx: typer.Context,
    program: Annotated[
        Path,
        typer.Argument(
            help="MicroPython program to run on boot (written to the board as main.py)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    port: PortOption,
    board: BoardOption = None,
    board_file: BoardFileOption = None,
    lib: Annotated[
        list[Path] | None,
        typer.Option(
            "--lib",
            "-l",
            help="Directory of library files to upload (repeatable)",
        ),
    ] = None,
    chip: ChipOption = None,
    baud: BaudOption = None,
    no_rtsdtr: NoRtsDtrOption = False,
) -> None:
    """Upload a program and its libraries to a MicroPython board.

    The board is checked for a working raw REPL and enough free space first.
    If either check fails, the MicroPython firmware is reflashed before the
    files are written. Library files already on the board are skipped; the
    program itself is always written.

    Examples:
        # Provision an ESP32 with the configured default preset
        mpybox provision blink.py --port /dev/ttyUSB0

        # K210 board with a library directory
        mpybox provision app.py --port /dev/ttyUSB0 --board k210 --lib ./lib

        # Board described in a YAML file
        mpybox provision app.py --port COM3 --board-file myboard.yaml
    """
    board_config = resolve_board_config(
        ctx,
        board=board,
        board_file=board_file,
        chip=chip,
        baud=baud,
        no_rtsdtr=no_rtsdtr,
    )
    code = program.read_text(encoding="utf-8")
    library_dirs = lib or []

    logger.info(
        "provision_command_started",
        program=str(program),
        port=port,
        chip=board_config.chip.value,
    )
    service = get_provision_service(ctx)
    result = service.provision(board_config, port, code, library_dirs)

    use_emoji = ctx.obj.use_emoji
    print_result(result, success_message=f"Board on {port} provisioned", use_emoji=use_emoji)
    if not result.success:
        raise typer.Exit(1)


def register_commands(app: typer.Typer) -> None:
    """Register the provision command with the main app."""
    app.command(name="provision")(provision)
