"""Firmware flasher implementations."""

from abc import ABC, abstractmethod
from pathlib import Path

from mpybox.core.errors import (
    FirmwareNotFoundError,
    FlashError,
    NonZeroExitError,
    ProcessError,
    UnknownChipFamilyError,
)
from mpybox.core.structlog_logger import get_struct_logger
from mpybox.models.board import BoardConfig, ChipFamily
from mpybox.protocols.process_protocols import (
    OutputSinkProtocol,
    ProcessRunnerProtocol,
)
from mpybox.utils.output_sink import SinkOutputMiddleware
from mpybox.utils.stream_process import check_exit


logger = get_struct_logger(__name__)

ESPTOOL_MODULE_NAME = "esptool"
KFLASH_MODULE_NAME = "kflash"

# write_flash arguments placed before the image, per chip
ESP_WRITE_FLASH_LAYOUT: dict[ChipFamily, list[str]] = {
    ChipFamily.ESP32: ["-z", "0x1000"],
    ChipFamily.ESP8266: ["--flash_size=detect", "0"],
}


class ToolFlasher(ABC):
    """Shared plumbing for flashers that drive a Python tool module.

    Subclasses build one argument list per step; ``flash`` runs them in order
    and stops at the first failure. Every invocation streams the tool's stdout
    to the output sink.
    """

    tool_name: str = ""
    # Action name reported for each command of build_commands
    step_actions: tuple[str, ...] = ()

    def __init__(
        self,
        runner: ProcessRunnerProtocol,
        sink: OutputSinkProtocol,
        python_path: str | Path,
    ) -> None:
        self.runner = runner
        self.sink = sink
        self.python_path = str(python_path)

    @abstractmethod
    def build_commands(
        self, board: BoardConfig, port: str, firmware_file: Path
    ) -> list[list[str]]:
        """Argument lists for every tool invocation, in execution order."""

    def flash(self, board: BoardConfig, port: str, firmware_file: Path) -> None:
        """Run every step of the flash.

        Raises:
            FirmwareNotFoundError: If the image does not exist
            FlashError: If a step failed
        """
        self._check_firmware(firmware_file)
        commands = self.build_commands(board, port, firmware_file)

        logger.info(
            "firmware_flash_started",
            chip=board.chip.value,
            port=port,
            firmware=str(firmware_file),
        )
        for args, action in zip(commands, self.step_actions, strict=True):
            logger.debug("firmware_step_started", tool=self.tool_name, action=action)
            self._run_step(args, action)
        logger.info("firmware_flashed", chip=board.chip.value)

    def _run_step(self, args: list[str], action: str) -> None:
        try:
            result = self.runner.run(
                self.python_path,
                args,
                middleware=SinkOutputMiddleware(self.sink),
                tool=self.tool_name,
            )
            check_exit(result, self.tool_name, action)
        except NonZeroExitError as e:
            logger.error("flash_step_failed", tool=self.tool_name, action=action)
            raise FlashError(str(e)) from e
        except ProcessError as e:
            logger.error("flash_step_failed", tool=self.tool_name, action=action)
            raise FlashError(f"{self.tool_name} failed to {action}: {e}") from e

    def _check_firmware(self, firmware_file: Path) -> None:
        if not firmware_file.is_file():
            raise FirmwareNotFoundError(firmware_file)


class BlockEraseFlasher(ToolFlasher):
    """Erase the whole flash, then write the image (esp32/esp8266)."""

    tool_name = ESPTOOL_MODULE_NAME
    step_actions = ("erase", "flash")

    def build_erase_args(self, board: BoardConfig, port: str) -> list[str]:
        return [
            f"-m{ESPTOOL_MODULE_NAME}",
            "--chip",
            board.chip.value,
            "--port",
            port,
            "erase_flash",
        ]

    def build_write_args(
        self, board: BoardConfig, port: str, firmware_file: Path
    ) -> list[str]:
        layout = ESP_WRITE_FLASH_LAYOUT.get(board.chip)
        if layout is None:
            raise UnknownChipFamilyError(board.chip.value)
        return [
            f"-m{ESPTOOL_MODULE_NAME}",
            "--chip",
            board.chip.value,
            "--port",
            port,
            "--baud",
            str(board.baud),
            "write_flash",
            *layout,
            str(firmware_file),
        ]

    def build_commands(
        self, board: BoardConfig, port: str, firmware_file: Path
    ) -> list[list[str]]:
        return [
            self.build_erase_args(board, port),
            self.build_write_args(board, port, firmware_file),
        ]


class SinglePassFlasher(ToolFlasher):
    """Write the image in one kflash run (k210)."""

    tool_name = KFLASH_MODULE_NAME
    step_actions = ("flash",)

    def build_write_args(
        self, board: BoardConfig, port: str, firmware_file: Path
    ) -> list[str]:
        args = [
            f"-m{KFLASH_MODULE_NAME}",
            f"-p{port}",
            f"-b{board.baud}",
            f"-B{board.board}",
        ]
        if board.slow_mode:
            args.append("-S")
        args.append(str(firmware_file))
        return args

    def build_commands(
        self, board: BoardConfig, port: str, firmware_file: Path
    ) -> list[list[str]]:
        return [self.build_write_args(board, port, firmware_file)]


FLASHER_REGISTRY: dict[ChipFamily, type[ToolFlasher]] = {
    ChipFamily.ESP32: BlockEraseFlasher,
    ChipFamily.ESP8266: BlockEraseFlasher,
    ChipFamily.K210: SinglePassFlasher,
}


def create_firmware_flasher(
    chip: ChipFamily | str,
    runner: ProcessRunnerProtocol,
    sink: OutputSinkProtocol,
    python_path: str | Path,
) -> ToolFlasher:
    """Create the flasher for a chip family.

    Raises:
        UnknownChipFamilyError: If no flasher handles the family
    """
    family = ChipFamily.from_name(chip)
    flasher_cls = FLASHER_REGISTRY.get(family)
    if flasher_cls is None:
        raise UnknownChipFamilyError(family.value)
    return flasher_cls(runner=runner, sink=sink, python_path=python_path)
