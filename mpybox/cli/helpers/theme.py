"""Rich styling shared by CLI commands."""

from rich.console import Console
from rich.table import Table
from rich.theme import Theme


class Colors:
    """Color palette for CLI output."""

    SUCCESS = "bold green"
    ERROR = "bold red"
    WARNING = "bold yellow"
    INFO = "bold blue"

    PRIMARY = "cyan"
    SECONDARY = "blue"
    ACCENT = "magenta"
    MUTED = "dim"

    HEADER = "bold cyan"
    NORMAL = "white"


class Icons:
    """Icons for message types, with plain-text fallbacks."""

    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    BULLET = "•"
    BOARD = "🔌"
    FLASH = "⚡"
    FOLDER = "📁"

    TEXT_FALLBACKS = {
        "SUCCESS": "[OK]",
        "ERROR": "[ERROR]",
        "WARNING": "[WARN]",
        "INFO": "[INFO]",
        "BULLET": "-",
        "BOARD": "",
        "FLASH": "",
        "FOLDER": "",
    }

    @classmethod
    def get_icon(cls, icon_name: str, use_emoji: bool = True) -> str:
        if use_emoji:
            return str(getattr(cls, icon_name, ""))
        return cls.TEXT_FALLBACKS.get(icon_name, "")


MPYBOX_THEME = Theme(
    {
        "success": Colors.SUCCESS,
        "error": Colors.ERROR,
        "warning": Colors.WARNING,
        "info": Colors.INFO,
        "primary": Colors.PRIMARY,
        "muted": Colors.MUTED,
    }
)


class ThemedConsole:
    """Console wrapper with the mpybox theme applied."""

    def __init__(self, use_emoji: bool = True) -> None:
        self.console = Console(theme=MPYBOX_THEME)
        self.use_emoji = use_emoji

    def _with_icon(self, icon_name: str, message: str) -> str:
        icon = Icons.get_icon(icon_name, self.use_emoji)
        return f"{icon} {message}" if icon else message

    def print_success(self, message: str) -> None:
        self.console.print(self._with_icon("SUCCESS", message), style="success")

    def print_error(self, message: str) -> None:
        self.console.print(self._with_icon("ERROR", message), style="error")

    def print_warning(self, message: str) -> None:
        self.console.print(self._with_icon("WARNING", message), style="warning")

    def print_info(self, message: str) -> None:
        self.console.print(self._with_icon("INFO", message), style="info")

    def print_list_item(self, message: str, indent: int = 1) -> None:
        spacing = "  " * indent
        self.console.print(
            f"{spacing}{self._with_icon('BULLET', message)}", style="primary"
        )


class TableStyles:
    """Predefined table layouts."""

    @staticmethod
    def create_basic_table(
        title: str = "", icon: str = "", use_emoji: bool = True
    ) -> Table:
        display_icon = Icons.get_icon(icon.upper(), use_emoji) if icon else ""
        full_title = f"{display_icon} {title}" if display_icon and title else title
        return Table(
            title=full_title,
            show_header=True,
            header_style=Colors.HEADER,
            border_style=Colors.SECONDARY,
        )

    @staticmethod
    def create_board_table(use_emoji: bool = True) -> Table:
        """Create table for board preset listings."""
        table = TableStyles.create_basic_table("Board Presets", "BOARD", use_emoji)
        table.add_column("Preset", style=Colors.PRIMARY, no_wrap=True)
        table.add_column("Chip", style=Colors.ACCENT)
        table.add_column("Baud", style=Colors.NORMAL)
        table.add_column("Board", style=Colors.NORMAL)
        table.add_column("Firmware", style=Colors.MUTED)
        return table

    @staticmethod
    def create_file_table(use_emoji: bool = True) -> Table:
        """Create table for board filesystem listings."""
        table = TableStyles.create_basic_table("Board Files", "FOLDER", use_emoji)
        table.add_column("File", style=Colors.PRIMARY)
        return table


def get_themed_console(use_emoji: bool = True) -> ThemedConsole:
    return ThemedConsole(use_emoji=use_emoji)
