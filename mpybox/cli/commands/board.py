"""Board inspection commands."""

import typer
from rich.console import Console

from mpybox.cli.decorators import handle_errors
from mpybox.cli.helpers import print_info_message, print_list_item
from mpybox.cli.helpers.board import (
    get_provision_service,
    get_user_config_from_context,
    resolve_board_config,
)
from mpybox.cli.helpers.parameters import BoardFileOption, BoardOption, PortOption
from mpybox.cli.helpers.theme import TableStyles
from mpybox.config.boards import available_boards
from mpybox.models.board import resolve_platform_value


board_app = typer.Typer(
    name="board",
    help="""Inspect boards and board presets.

Query the filesystem of a board over its raw REPL, or list the presets
available for --board.""",
    no_args_is_help=True,
)


@board_app.command(name="ls")
@handle_errors
def list_files(
    ctx: typer.Context,
    port: PortOption,
    board: BoardOption = None,
    board_file: BoardFileOption = None,
) -> None:
    """List the files on the board's filesystem."""
    board_config = resolve_board_config(ctx, board=board, board_file=board_file)
    names = get_provision_service(ctx).list_files(board_config, port)

    if not names:
        print_info_message(f"No files on board at {port}", use_emoji=ctx.obj.use_emoji)
        return

    table = TableStyles.create_file_table(use_emoji=ctx.obj.use_emoji)
    for name in names:
        table.add_row(name)
    Console().print(table)


@board_app.command(name="space")
@handle_errors
def rest_space(
    ctx: typer.Context,
    port: PortOption,
    board: BoardOption = None,
    board_file: BoardFileOption = None,
) -> None:
    """Show the free space on the board's filesystem."""
    board_config = resolve_board_config(ctx, board=board, board_file=board_file)
    space = get_provision_service(ctx).rest_space(board_config, port)

    use_emoji = ctx.obj.use_emoji
    print_info_message(f"Free space on {port}", use_emoji=use_emoji)
    print_list_item(f"Block size: {space.block_size} bytes", use_emoji=use_emoji)
    print_list_item(f"Free blocks: {space.free_blocks}", use_emoji=use_emoji)
    print_list_item(f"Free bytes: {space.free_bytes}", use_emoji=use_emoji)


@board_app.command(name="presets")
@handle_errors
def list_presets(ctx: typer.Context) -> None:
    """List the board presets available for --board."""
    user_config = get_user_config_from_context(ctx)
    boards = available_boards(user_config.config.boards)

    table = TableStyles.create_board_table(use_emoji=ctx.obj.use_emoji)
    for name, data in sorted(boards.items()):
        baud = data.get("baud")
        try:
            baud_text = str(resolve_platform_value(baud)) if baud is not None else "-"
        except ValueError:
            baud_text = "unsupported platform"
        table.add_row(
            name,
            str(data.get("chip", "-")),
            baud_text,
            str(data.get("board") or "-"),
            str(data.get("firmware", "-")),
        )
    Console().print(table)


def register_commands(app: typer.Typer) -> None:
    """Register board commands with the main app."""
    app.add_typer(board_app, name="board")
