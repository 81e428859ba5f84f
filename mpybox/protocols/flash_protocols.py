"""Protocol definitions for firmware flashers."""

from pathlib import Path
from typing import Protocol, runtime_checkable

from mpybox.models.board import BoardConfig


@runtime_checkable
class FirmwareFlasherProtocol(Protocol):
    """Erases (where applicable) and writes a firmware image."""

    def flash(self, board: BoardConfig, port: str, firmware_file: Path) -> None:
        """Write ``firmware_file`` to the board on ``port``.

        Raises:
            FlashError: If any step of the flash failed
        """
        ...

    def build_commands(
        self, board: BoardConfig, port: str, firmware_file: Path
    ) -> list[list[str]]:
        """Argument lists for every tool invocation, in execution order."""
        ...
