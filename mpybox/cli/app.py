"""Main CLI application for mpybox."""

import logging
import sys

# Import version from package metadata directly to avoid circular imports
from importlib.metadata import distribution
from typing import Annotated

import typer

from mpybox.cli.decorators.error_handling import print_stack_trace_if_verbose
from mpybox.cli.helpers.output import print_error_message
from mpybox.config.user_config import UserConfig, create_user_config
from mpybox.core.errors import ConfigError
from mpybox.core.logging import setup_logging


__all__ = ["app", "main", "__version__", "AppContext"]


__version__ = distribution("mpybox").version

logger = logging.getLogger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        verbose: int = 0,
        log_file: str | None = None,
        config_file: str | None = None,
        no_emoji: bool = False,
    ):
        """Initialize AppContext.

        Args:
            verbose: Verbosity level
            log_file: Path to log file
            config_file: Path to configuration file
            no_emoji: Whether to disable emoji icons

        Raises:
            ConfigError: If the configuration file is missing or invalid
        """
        self.verbose = verbose
        self.log_file = log_file
        self.config_file = config_file
        self.no_emoji = no_emoji

        self.user_config: UserConfig = create_user_config(cli_config_path=config_file)

    @property
    def use_emoji(self) -> bool:
        return not self.no_emoji


app = typer.Typer(
    name="mpybox",
    help=f"""mpybox MicroPython Board Provisioning Tool v{__version__}

Puts a MicroPython program and its libraries on an ESP32, ESP8266 or K210
board over a serial port, reflashing the firmware when the board does not
answer or has run out of space.

Common workflows:
  • Provision a board:  mpybox provision main.py --port /dev/ttyUSB0 --lib ./lib
  • List board files:   mpybox board ls --port /dev/ttyUSB0
  • Reflash firmware:   mpybox firmware flash --port /dev/ttyUSB0 --board k210""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to configuration file"),
    ] = None,
    no_emoji: Annotated[
        bool,
        typer.Option("--no-emoji", help="Disable emoji icons in output"),
    ] = False,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """mpybox MicroPython Board Provisioning Tool."""
    if version:
        print(f"mpybox v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    try:
        app_context = AppContext(
            verbose=verbose,
            log_file=log_file,
            config_file=config_file,
            no_emoji=no_emoji,
        )
    except ConfigError as e:
        print_error_message(str(e), use_emoji=not no_emoji)
        raise typer.Exit(1) from e
    ctx.obj = app_context

    # Set log level based on verbosity, debug flag, or config
    log_level = logging.WARNING
    if debug:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    elif verbose >= 2:
        log_level = logging.DEBUG
    else:
        log_level = app_context.user_config.get_log_level_int()

    setup_logging(level=log_level, log_file=log_file)


def main() -> int:
    """Main CLI entry point."""
    exit_code = 0

    try:
        from mpybox.cli.commands import register_all_commands

        register_all_commands(app)

        app()
        exit_code = 0

    except SystemExit as e:
        # Capture SystemExit code (normal CLI exit)
        exit_code = e.code if isinstance(e.code, int) else 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        print_stack_trace_if_verbose()
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
