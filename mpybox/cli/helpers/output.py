"""Helper functions for CLI output formatting with Rich integration."""

from mpybox.cli.helpers.theme import get_themed_console
from mpybox.models.results import BaseResult


def print_success_message(message: str, use_emoji: bool = True) -> None:
    get_themed_console(use_emoji=use_emoji).print_success(message)


def print_error_message(message: str, use_emoji: bool = True) -> None:
    get_themed_console(use_emoji=use_emoji).print_error(message)


def print_warning_message(message: str, use_emoji: bool = True) -> None:
    get_themed_console(use_emoji=use_emoji).print_warning(message)


def print_info_message(message: str, use_emoji: bool = True) -> None:
    get_themed_console(use_emoji=use_emoji).print_info(message)


def print_list_item(item: str, indent: int = 1, use_emoji: bool = True) -> None:
    """Print a list item with bullet and indentation."""
    get_themed_console(use_emoji=use_emoji).print_list_item(item, indent)


def print_result(
    result: BaseResult,
    success_message: str = "Operation completed successfully",
    use_emoji: bool = True,
) -> None:
    """Print operation result with appropriate formatting.

    Args:
        result: The operation result object
        success_message: Headline printed when the operation succeeded
        use_emoji: Whether to use emoji icons
    """
    if result.success:
        print_success_message(success_message, use_emoji=use_emoji)
        for message in result.messages:
            print_list_item(message, use_emoji=use_emoji)
    else:
        print_error_message("Operation failed", use_emoji=use_emoji)
        for error in result.errors:
            print_list_item(error, use_emoji=use_emoji)
