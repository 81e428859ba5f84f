"""Provisioning state machine.

A run moves through discovery, space accounting, an optional firmware reflash
and the file upload. Each state has one handler that inspects and updates the
run context and returns the next state.
"""

from collections.abc import Callable
from pathlib import Path

from mpybox.board.decision import evaluate_space, file_size
from mpybox.board.provision_state import ProvisionContext, ProvisionState
from mpybox.board.repl import RawReplClient
from mpybox.core.errors import MpyboxError, ProcessError, ProtocolParseError, UploadError
from mpybox.core.structlog_logger import get_struct_logger
from mpybox.models.board import BoardConfig
from mpybox.protocols.flash_protocols import FirmwareFlasherProtocol
from mpybox.protocols.process_protocols import OutputSinkProtocol
from mpybox.utils.output_sink import Styles


logger = get_struct_logger(__name__)

REASON_REPL_UNAVAILABLE = "raw REPL unavailable"
REASON_SPACE_UNKNOWN = "free space unknown"
REASON_SPACE_INSUFFICIENT = "insufficient space"


class ProvisioningOrchestrator:
    """Sequence the steps that put a program and its libraries on a board.

    Discovery and space-query failures fall back to a firmware reflash; a
    failed reflash or write ends the run in ``FAILED``.
    """

    def __init__(
        self,
        board: BoardConfig,
        port: str,
        repl: RawReplClient,
        flasher: FirmwareFlasherProtocol,
        sink: OutputSinkProtocol,
        firmware_file: Path,
        size_of: Callable[[Path], int] = file_size,
    ) -> None:
        self.board = board
        self.port = port
        self.repl = repl
        self.flasher = flasher
        self.sink = sink
        self.firmware_file = firmware_file
        self.size_of = size_of

        self._handlers: dict[
            ProvisionState, Callable[[ProvisionContext], ProvisionState]
        ] = {
            ProvisionState.IDLE: self._start,
            ProvisionState.DISCOVERING_REPL: self._discover_repl,
            ProvisionState.CHECKING_SPACE: self._check_space,
            ProvisionState.REFLASHING_FIRMWARE: self._reflash_firmware,
            ProvisionState.WRITING_FILES: self._write_files,
        }

    def step(self, ctx: ProvisionContext) -> ProvisionState:
        """Run the handler for ``ctx.state`` and move to the state it returns.

        Raises:
            ValueError: If the context is already in a terminal state
        """
        if ctx.state.is_terminal:
            raise ValueError(f"Provisioning already finished in state {ctx.state.value}")

        current = ctx.state
        try:
            next_state = self._handlers[current](ctx)
        except OSError as e:
            # Local files vanished or became unreadable mid-run
            logger.error("provision_file_error", state=current.value, error=str(e))
            ctx.error = e
            next_state = ProvisionState.FAILED
        ctx.history.append(current)
        ctx.state = next_state
        logger.debug(
            "provision_transition", from_state=current.value, to_state=next_state.value
        )
        return next_state

    def run(self, ctx: ProvisionContext) -> ProvisionContext:
        """Step until the run is done or failed."""
        logger.info(
            "provision_started",
            chip=self.board.chip.value,
            port=self.port,
            files=len(ctx.manifest),
        )
        while not ctx.state.is_terminal:
            self.step(ctx)

        if ctx.failed:
            logger.error(
                "provision_failed",
                error=str(ctx.error),
                error_type=type(ctx.error).__name__,
            )
        else:
            self.sink.write("Success", style=Styles.SUCCESS)
            logger.info(
                "provision_completed",
                reflashed=ctx.reflashed,
                written=len(ctx.written),
                skipped=len(ctx.skipped),
                duration=round(ctx.elapsed_time, 2),
            )
        return ctx

    def _start(self, ctx: ProvisionContext) -> ProvisionState:
        return ProvisionState.DISCOVERING_REPL

    def _discover_repl(self, ctx: ProvisionContext) -> ProvisionState:
        self.sink.write("Try to enter raw REPL.")
        try:
            names = self.repl.list_files(self.board, self.port)
        except (ProcessError, ProtocolParseError) as e:
            logger.warning("repl_discovery_failed", error=str(e))
            ctx.existing_files.reset()
            self.sink.write("Could not enter raw REPL.", style=Styles.WARNING)
            self.sink.write("Try to flash micropython firmware to fix.")
            return self._fall_back_to_reflash(ctx, REASON_REPL_UNAVAILABLE)

        ctx.existing_files.update(names)
        return ProvisionState.CHECKING_SPACE

    def _check_space(self, ctx: ProvisionContext) -> ProvisionState:
        self.sink.write("Try to check rest space.")
        try:
            space = self.repl.rest_space(self.board, self.port)
        except (ProcessError, ProtocolParseError) as e:
            logger.warning("space_query_failed", error=str(e))
            space = None

        if space is None or not space.is_resolved:
            ctx.space = None
            self.sink.write("Could not check rest space.", style=Styles.WARNING)
            self.sink.write("Try to flash micropython firmware to fix.")
            return self._fall_back_to_reflash(ctx, REASON_SPACE_UNKNOWN)

        ctx.space = space
        decision = evaluate_space(
            ctx.manifest, ctx.existing_files, space, self.board.chip, self.size_of
        )
        logger.debug(
            "space_evaluated",
            required=decision.required,
            capacity=decision.capacity,
            threshold=decision.threshold,
        )
        if decision.reflash:
            self.sink.write("The space of board is insufficient.", style=Styles.WARNING)
            self.sink.write(
                "Try to flash micropython firmware to refresh the memory space "
                "of the board."
            )
            return self._fall_back_to_reflash(ctx, REASON_SPACE_INSUFFICIENT)

        return ProvisionState.WRITING_FILES

    def _fall_back_to_reflash(
        self, ctx: ProvisionContext, reason: str
    ) -> ProvisionState:
        ctx.reflash_reason = reason
        logger.info("reflash_required", reason=reason)
        return ProvisionState.REFLASHING_FIRMWARE

    def _reflash_firmware(self, ctx: ProvisionContext) -> ProvisionState:
        ctx.invalidate_board_knowledge()
        try:
            self.flasher.flash(self.board, self.port, self.firmware_file)
        except MpyboxError as e:
            ctx.error = e
            return ProvisionState.FAILED

        ctx.reflashed = True
        return ProvisionState.WRITING_FILES

    def _write_files(self, ctx: ProvisionContext) -> ProvisionState:
        self.sink.write("Writing files...")
        for path in ctx.manifest:
            if not ctx.manifest.is_entry(path) and ctx.existing_files.is_present(
                path.name
            ):
                self.sink.write(f"{path} already written", style=Styles.MUTED)
                ctx.skipped.append(path)
                continue

            # Free space changes with the first write
            ctx.space = None
            try:
                self.repl.put_file(self.board, self.port, path)
            except ProcessError as e:
                ctx.error = UploadError(path, e)
                return ProvisionState.FAILED

            self.sink.write(f"{path} write finish")
            ctx.written.append(path)

        return ProvisionState.DONE

