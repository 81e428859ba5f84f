"""Firmware commands."""

import typer

from mpybox.cli.decorators import handle_errors
from mpybox.cli.helpers import print_success_message, print_warning_message
from mpybox.cli.helpers.board import get_provision_service, resolve_board_config
from mpybox.cli.helpers.parameters import (
    BaudOption,
    BoardFileOption,
    BoardOption,
    PortOption,
)


firmware_app = typer.Typer(
    name="firmware",
    help="""Firmware management commands.

Flash the MicroPython firmware image configured for a board. Images are read
from the configured firmware_dir.""",
    no_args_is_help=True,
)


@firmware_app.command(name="flash")
@handle_errors
def flash(
    ctx: typer.Context,
    port: PortOption,
    board: BoardOption = None,
    board_file: BoardFileOption = None,
    baud: BaudOption = None,
) -> None:
    """Reflash the board's MicroPython firmware.

    ESP32 and ESP8266 boards are erased before the image is written; this
    removes every file on the board.

    Examples:
        mpybox firmware flash --port /dev/ttyUSB0 --board esp8266
        mpybox firmware flash --port /dev/ttyUSB0 --board k210 --baud 115200
    """
    board_config = resolve_board_config(
        ctx, board=board, board_file=board_file, baud=baud
    )
    use_emoji = ctx.obj.use_emoji
    print_warning_message(
        f"Reflashing replaces the firmware; files on the board at {port} may be lost",
        use_emoji=use_emoji,
    )
    firmware = get_provision_service(ctx).flash_firmware(board_config, port)
    print_success_message(
        f"Flashed {firmware.name} to board on {port}", use_emoji=use_emoji
    )


def register_commands(app: typer.Typer) -> None:
    """Register firmware commands with the main app."""
    app.add_typer(firmware_app, name="firmware")
