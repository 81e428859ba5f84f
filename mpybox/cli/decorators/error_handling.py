"""Error handling decorators for CLI commands."""

import logging
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer

from mpybox.cli.helpers.output import print_error_message
from mpybox.core.errors import (
    ConfigError,
    FlashError,
    MpyboxError,
    ProcessError,
    ProtocolParseError,
    UploadError,
)
from mpybox.core.structlog_logger import get_struct_logger


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)

# Checked in order, so subclasses come before their bases
ERROR_EVENTS: list[tuple[type[BaseException], str]] = [
    (ConfigError, "configuration_error"),
    (FlashError, "flash_error"),
    (UploadError, "upload_error"),
    (ProtocolParseError, "protocol_error"),
    (ProcessError, "process_error"),
    (MpyboxError, "mpybox_error"),
    (FileNotFoundError, "file_not_found"),
]


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to handle common exceptions in CLI commands.

    Known errors are logged as an event, shown to the user and turned into
    exit code 1.

    Args:
        func: The function to decorate

    Returns:
        Decorated function with error handling
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            event = next(
                (name for error_type, name in ERROR_EVENTS if isinstance(e, error_type)),
                None,
            )
            if event is None:
                exc_info = logging.getLogger().isEnabledFor(logging.DEBUG)
                logger.error("unexpected_error", error=str(e), exc_info=exc_info)
            else:
                logger.error(event, error=str(e), error_type=type(e).__name__)
            print_error_message(str(e), use_emoji=_use_emoji(kwargs))
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e

    return wrapper


def _use_emoji(kwargs: dict[str, Any]) -> bool:
    """Read the --no-emoji choice from the Typer context passed to a command."""
    ctx = kwargs.get("ctx")
    app_ctx = getattr(ctx, "obj", None)
    return bool(getattr(app_ctx, "use_emoji", True))


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if any(arg in sys.argv for arg in ["-v", "-vv", "--verbose", "--debug"]):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
