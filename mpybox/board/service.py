"""Board provisioning service."""

from collections.abc import Iterable
from pathlib import Path

from mpybox.board.flasher_methods import create_firmware_flasher
from mpybox.board.orchestrator import ProvisioningOrchestrator
from mpybox.board.provision_state import ProvisionContext
from mpybox.board.repl import RawReplClient
from mpybox.config.models import UserConfigData
from mpybox.core.errors import ConfigError
from mpybox.core.structlog_logger import StructlogMixin
from mpybox.models.board import BoardConfig
from mpybox.models.manifest import ENTRY_FILE_NAME, build_manifest
from mpybox.models.results import ProvisionResult
from mpybox.models.space import SpaceState
from mpybox.protocols.process_protocols import (
    OutputSinkProtocol,
    ProcessRunnerProtocol,
)
from mpybox.utils.output_sink import ConsoleOutputSink
from mpybox.utils.stream_process import create_subprocess_runner


class ProvisionService(StructlogMixin):
    """Put a MicroPython program and its libraries on a board.

    The service stages the program as the board's entry file, builds the
    manifest and drives the provisioning state machine. The lower-level board
    operations are exposed for direct use by the CLI.
    """

    def __init__(
        self,
        config: UserConfigData,
        runner: ProcessRunnerProtocol,
        sink: OutputSinkProtocol,
    ) -> None:
        super().__init__()
        self.config = config
        self.runner = runner
        self.sink = sink
        self.repl = RawReplClient(
            runner=runner,
            python_path=config.python_path,
            start_delay=config.start_delay,
        )

    @property
    def entry_file(self) -> Path:
        return self.config.project_dir / ENTRY_FILE_NAME

    def firmware_path(self, board: BoardConfig) -> Path:
        return self.config.firmware_dir / board.firmware

    def prepare_entry_file(self, code: str) -> Path:
        """Write the program source as the entry file in the project directory.

        Raises:
            ConfigError: If the project directory is not writable
        """
        entry = self.entry_file
        try:
            entry.parent.mkdir(parents=True, exist_ok=True)
            entry.write_text(code, encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot stage program in {entry.parent}: {e}") from e

        self.logger.debug("entry_file_prepared", path=str(entry), size=len(code))
        return entry

    def create_orchestrator(self, board: BoardConfig, port: str) -> ProvisioningOrchestrator:
        """Build the state machine for one board.

        Raises:
            UnknownChipFamilyError: If no flasher handles the board's chip
        """
        flasher = create_firmware_flasher(
            board.chip, self.runner, self.sink, self.config.python_path
        )
        return ProvisioningOrchestrator(
            board=board,
            port=port,
            repl=self.repl,
            flasher=flasher,
            sink=self.sink,
            firmware_file=self.firmware_path(board),
        )

    def provision(
        self,
        board: BoardConfig,
        port: str,
        code: str,
        library_dirs: Iterable[str | Path] = (),
    ) -> ProvisionResult:
        """Provision ``board`` on ``port`` with ``code`` and library files.

        Args:
            board: Board configuration for this run
            port: Serial port the board is attached to
            code: Source text of the program to run on boot
            library_dirs: Directories whose files are uploaded alongside

        Returns:
            ProvisionResult describing what was written, skipped or reflashed

        Raises:
            ConfigError: If the program cannot be staged
            UnknownChipFamilyError: If the board's chip is not supported
        """
        orchestrator = self.create_orchestrator(board, port)
        entry = self.prepare_entry_file(code)
        manifest = build_manifest(entry, library_dirs)

        self.logger.info(
            "provision_requested",
            chip=board.chip.value,
            port=port,
            libraries=len(manifest.libraries),
        )
        ctx = orchestrator.run(ProvisionContext(manifest=manifest))
        return self._build_result(ctx)

    def _build_result(self, ctx: ProvisionContext) -> ProvisionResult:
        result = ProvisionResult(
            success=ctx.succeeded,
            reflashed=ctx.reflashed,
            reflash_reason=ctx.reflash_reason,
            files_written=[str(path) for path in ctx.written],
            files_skipped=[str(path) for path in ctx.skipped],
            final_state=ctx.state.value,
        )
        if ctx.reflash_reason:
            result.add_message(f"Firmware reflash triggered: {ctx.reflash_reason}")
        if ctx.written:
            result.add_message(f"Wrote {len(ctx.written)} file(s)")
        if ctx.skipped:
            result.add_message(f"Skipped {len(ctx.skipped)} file(s) already on the board")

        if ctx.failed:
            if ctx.error is not None:
                self.log_error_with_context("provision_failed", ctx.error)
                result.add_error(str(ctx.error))
            else:
                result.add_error("Provisioning failed")
        return result

    def list_files(self, board: BoardConfig, port: str) -> list[str]:
        """Filenames on the board's filesystem."""
        return self.repl.list_files(board, port)

    def rest_space(self, board: BoardConfig, port: str) -> SpaceState:
        """Free space on the board's filesystem."""
        return self.repl.rest_space(board, port)

    def flash_firmware(self, board: BoardConfig, port: str) -> Path:
        """Reflash the board's firmware unconditionally.

        Returns:
            Path of the firmware image that was written

        Raises:
            UnknownChipFamilyError: If the board's chip is not supported
            FlashError: If the image is missing or the tool failed
        """
        firmware = self.firmware_path(board)
        flasher = create_firmware_flasher(
            board.chip, self.runner, self.sink, self.config.python_path
        )
        self.logger.info("firmware_flash_requested", chip=board.chip.value, port=port)
        flasher.flash(board, port, firmware)
        return firmware


def create_provision_service(
    config: UserConfigData | None = None,
    runner: ProcessRunnerProtocol | None = None,
    sink: OutputSinkProtocol | None = None,
) -> ProvisionService:
    """Create a ProvisionService with default collaborators.

    Args:
        config: User configuration (defaults to values from the environment)
        runner: Process runner (defaults to a subprocess runner honoring
            ``config.process_timeout``)
        sink: Progress output (defaults to the console)
    """
    config = config or UserConfigData()
    return ProvisionService(
        config=config,
        runner=runner or create_subprocess_runner(timeout=config.process_timeout),
        sink=sink or ConsoleOutputSink(),
    )
