"""Process execution and streaming output handling.

This module runs external tools and hands every line they print to an
``OutputMiddleware`` as soon as it arrives, so long-running flashing tools
can report progress live.

Example:
    ```python
    from mpybox.utils.stream_process import SubprocessRunner, check_exit

    runner = SubprocessRunner()
    result = runner.run(sys.executable, ["-mesptool", "version"])
    check_exit(result, tool="esptool", action="report its version")
    ```
"""

import shlex
import subprocess
from threading import Thread
from typing import IO, Any, Generic, NamedTuple, TypeVar, cast

from mpybox.core.errors import LaunchFailureError, NonZeroExitError, ProcessTimeoutError
from mpybox.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)

T = TypeVar("T")  # Type of processed output


class ProcessResult(NamedTuple):
    """Exit status and processed output of a finished process."""

    return_code: int
    stdout: list[Any]
    stderr: list[Any]


class OutputMiddleware(Generic[T]):
    """Base class for processing command output streams.

    Type parameter T represents the return type of the process method,
    allowing middleware to transform strings into other types if needed.
    Returning ``None`` drops the line from the captured output.
    """

    def process(self, line: str, stream_type: str) -> T:
        """Process a line of output from a subprocess stream.

        Args:
            line: A line of text from the process output
            stream_type: Either "stdout" or "stderr"

        Returns:
            Processed output of type T
        """
        raise NotImplementedError()


class CaptureOutputMiddleware(OutputMiddleware[str]):
    """Capture lines unchanged, logging them at debug level."""

    def process(self, line: str, stream_type: str) -> str:
        logger.debug("process_output", stream=stream_type, line=line)
        return line


def run_command(
    cmd: str | list[str],
    middleware: OutputMiddleware[T] | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """Run a command and process its output through middleware.

    Output of both streams is read on background threads and handed to the
    middleware line by line. The call blocks until the process exits, or
    until ``timeout`` seconds elapse when one is given.

    Args:
        cmd: Command to run, either as a string or list of arguments
        middleware: Middleware for processing output (captures lines if None)
        timeout: Seconds to wait before killing the process, None waits forever

    Returns:
        ProcessResult with the return code and processed stdout/stderr lines

    Raises:
        OSError: If the process could not be started
        subprocess.TimeoutExpired: If the process was killed after ``timeout``
    """
    if middleware is None:
        middleware = cast(OutputMiddleware[T], CaptureOutputMiddleware())

    if isinstance(cmd, str):
        cmd = shlex.split(cmd)

    process = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        stdin=subprocess.DEVNULL,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
    )

    def stream_output(stream: IO[str], stream_type: str, captured: list[T]) -> None:
        for line in iter(stream.readline, ""):
            stripped_line = line.rstrip("\r\n")
            processed = middleware.process(stripped_line, stream_type)
            if processed is not None:
                captured.append(processed)
        stream.close()

    stdout_lines: list[T] = []
    stderr_lines: list[T] = []

    stdout_thread = Thread(
        target=stream_output, args=(process.stdout, "stdout", stdout_lines), daemon=True
    )
    stderr_thread = Thread(
        target=stream_output, args=(process.stderr, "stderr", stderr_lines), daemon=True
    )
    stdout_thread.start()
    stderr_thread.start()

    try:
        return_code = process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
        raise
    finally:
        stdout_thread.join()
        stderr_thread.join()

    return ProcessResult(return_code, stdout_lines, stderr_lines)


class SubprocessRunner:
    """Launch external tools as child processes.

    Implements ProcessRunnerProtocol. Launch errors and timeouts are turned
    into mpybox process errors; a non-zero exit status is returned to the
    caller for interpretation.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(
        self,
        executable: str,
        args: list[str],
        middleware: OutputMiddleware[Any] | None = None,
        tool: str = "",
    ) -> ProcessResult:
        """Run ``executable`` with ``args`` and wait for it to exit.

        Raises:
            LaunchFailureError: If the executable could not be started
            ProcessTimeoutError: If the process outlived the runner timeout
        """
        cmd = [executable, *args]
        tool_name = tool or executable
        logger.debug("process_starting", tool=tool_name, command=shlex.join(cmd))

        try:
            result = run_command(cmd, middleware=middleware, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            logger.error("process_timeout", tool=tool_name, timeout=self.timeout)
            raise ProcessTimeoutError(
                tool_name, "finish", self.timeout or 0.0
            ) from e
        except OSError as e:
            logger.error("process_launch_failed", tool=tool_name, error=str(e))
            raise LaunchFailureError(executable, str(e), tool=tool_name) from e

        logger.debug(
            "process_finished", tool=tool_name, return_code=result.return_code
        )
        return result


def check_exit(result: ProcessResult, tool: str, action: str) -> ProcessResult:
    """Raise NonZeroExitError unless the process reported success.

    Returns:
        The result unchanged, for chaining
    """
    if result.return_code != 0:
        raise NonZeroExitError(tool, action, result.return_code)
    return result


def create_subprocess_runner(timeout: float | None = None) -> SubprocessRunner:
    """Create a SubprocessRunner instance."""
    return SubprocessRunner(timeout=timeout)
