"""Helpers resolving board configuration and services from the CLI context."""

from pathlib import Path

import typer

from mpybox.board.service import ProvisionService, create_provision_service
from mpybox.config.boards import create_board_config
from mpybox.config.user_config import UserConfig
from mpybox.models.board import BoardConfig


def get_user_config_from_context(ctx: typer.Context) -> UserConfig:
    """Get UserConfig from Typer context."""
    from mpybox.cli.app import AppContext

    app_ctx: AppContext = ctx.obj
    return app_ctx.user_config


def resolve_board_config(
    ctx: typer.Context,
    board: str | None = None,
    board_file: Path | None = None,
    chip: str | None = None,
    baud: int | None = None,
    no_rtsdtr: bool = False,
) -> BoardConfig:
    """Build the BoardConfig for a command from its options.

    A board file wins over a preset; without either the configured default
    preset is used. Explicit options override values from both.
    """
    config = get_user_config_from_context(ctx).config
    name = board
    if name is None and board_file is None:
        name = config.default_board

    return create_board_config(
        name=name,
        board_file=board_file,
        user_boards=config.boards,
        chip=chip,
        baud=baud,
        rtsdtr=False if no_rtsdtr else None,
    )


def get_provision_service(ctx: typer.Context) -> ProvisionService:
    """Create a ProvisionService from the user configuration in context."""
    config = get_user_config_from_context(ctx).config
    return create_provision_service(config=config)
