"""Raw REPL file operations through the obmpy transfer tool."""

import json
from pathlib import Path

from pydantic import ValidationError

from mpybox.core.errors import ProtocolParseError
from mpybox.core.structlog_logger import get_struct_logger
from mpybox.models.board import BoardConfig
from mpybox.models.space import SpaceState
from mpybox.protocols.process_protocols import ProcessRunnerProtocol
from mpybox.utils.stream_process import CaptureOutputMiddleware, check_exit


logger = get_struct_logger(__name__)

OBMPY_MODULE_NAME = "obmpy"

# Interrupt the k210 runtime once before issuing the command
ABORT_ONCE_FLAG = "-a1"


def parse_file_listing(output: str) -> list[str]:
    """Parse ``ls`` output into filenames.

    Carriage returns and path separators are stripped and blank lines are
    dropped.
    """
    cleaned = output.strip().replace("\r", "").replace("/", "")
    return [name.strip() for name in cleaned.split("\n") if name.strip()]


def parse_space_report(output: str) -> SpaceState:
    """Parse ``restspace`` output into a SpaceState.

    The tool prints a Python dict literal such as ``{'bsize': 4096,
    'bfree': 120}``; quotes are normalized so it can be read as JSON.

    Raises:
        ProtocolParseError: If no valid record could be read
    """
    text = output.strip()
    # Tolerate banner lines before the record
    record_lines = [line for line in text.splitlines() if line.strip().startswith("{")]
    if record_lines:
        text = record_lines[-1].strip()

    try:
        data = json.loads(text.replace("'", '"'))
    except json.JSONDecodeError as e:
        raise ProtocolParseError("restspace", output, str(e)) from e

    if not isinstance(data, dict):
        raise ProtocolParseError("restspace", output, "expected a mapping")

    try:
        return SpaceState.model_validate(data)
    except ValidationError as e:
        raise ProtocolParseError("restspace", output, "missing bsize/bfree") from e


class RawReplClient:
    """List, measure and write files on a board over its raw REPL.

    Each operation launches the transfer tool once; nothing is kept open
    between calls.
    """

    def __init__(
        self,
        runner: ProcessRunnerProtocol,
        python_path: str | Path,
        start_delay: float = 1,
    ) -> None:
        self.runner = runner
        self.python_path = str(python_path)
        self.start_delay = start_delay

    @property
    def _delay_flag(self) -> str:
        return f"-d{self.start_delay:g}"

    def build_list_args(self, board: BoardConfig, port: str) -> list[str]:
        args = [
            f"-m{OBMPY_MODULE_NAME}",
            f"-p{port}",
            self._delay_flag,
            f"-r{board.rtsdtr_flag}",
        ]
        if board.chip.needs_repl_abort:
            args.append(ABORT_ONCE_FLAG)
        args.append("ls")
        return args

    def build_space_args(self, board: BoardConfig, port: str) -> list[str]:
        args = [
            f"-m{OBMPY_MODULE_NAME}",
            f"-p{port}",
            self._delay_flag,
            f"-r{board.rtsdtr_flag}",
        ]
        if board.chip.needs_repl_abort:
            args.append(ABORT_ONCE_FLAG)
        args.append("restspace")
        if board.chip.flash_root:
            args.append(board.chip.flash_root)
        return args

    def build_put_args(self, board: BoardConfig, port: str, file: Path) -> list[str]:
        args = [
            f"-m{OBMPY_MODULE_NAME}",
            self._delay_flag,
            f"-p{port}",
            f"-r{board.rtsdtr_flag}",
        ]
        if board.chip.needs_repl_abort:
            args.append(ABORT_ONCE_FLAG)
        args.extend(["put", str(file)])
        return args

    def list_files(self, board: BoardConfig, port: str) -> list[str]:
        """Filenames present on the board's filesystem.

        Raises:
            LaunchFailureError: If the transfer tool could not start
            NonZeroExitError: If the board did not answer
        """
        result = self.runner.run(
            self.python_path,
            self.build_list_args(board, port),
            middleware=CaptureOutputMiddleware(),
            tool=OBMPY_MODULE_NAME,
        )
        check_exit(result, OBMPY_MODULE_NAME, "list files")
        names = parse_file_listing("\n".join(result.stdout))
        logger.debug("board_files_listed", port=port, count=len(names))
        return names

    def rest_space(self, board: BoardConfig, port: str) -> SpaceState:
        """Block size and free blocks of the board's filesystem.

        Raises:
            LaunchFailureError: If the transfer tool could not start
            NonZeroExitError: If the board did not answer
            ProtocolParseError: If the report could not be read
        """
        result = self.runner.run(
            self.python_path,
            self.build_space_args(board, port),
            middleware=CaptureOutputMiddleware(),
            tool=OBMPY_MODULE_NAME,
        )
        check_exit(result, OBMPY_MODULE_NAME, "query free space")
        space = parse_space_report("\n".join(result.stdout))
        logger.debug(
            "board_space_reported",
            port=port,
            block_size=space.block_size,
            free_blocks=space.free_blocks,
        )
        return space

    def put_file(self, board: BoardConfig, port: str, file: Path) -> None:
        """Write ``file`` to the board's filesystem under its own name.

        Raises:
            LaunchFailureError: If the transfer tool could not start
            NonZeroExitError: If the write failed
        """
        result = self.runner.run(
            self.python_path,
            self.build_put_args(board, port, file),
            middleware=CaptureOutputMiddleware(),
            tool=OBMPY_MODULE_NAME,
        )
        check_exit(result, OBMPY_MODULE_NAME, "write")
