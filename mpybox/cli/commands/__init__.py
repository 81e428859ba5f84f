"""CLI command modules."""

import typer

from mpybox.cli.commands.board import register_commands as register_board_commands
from mpybox.cli.commands.firmware import (
    register_commands as register_firmware_commands,
)
from mpybox.cli.commands.provision import (
    register_commands as register_provision_commands,
)


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Args:
        app: The main Typer app
    """
    register_provision_commands(app)
    register_board_commands(app)
    register_firmware_commands(app)
