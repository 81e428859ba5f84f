"""Protocol definitions for external process execution and progress output."""

from typing import Any, Protocol, runtime_checkable

from mpybox.utils.stream_process import OutputMiddleware, ProcessResult


@runtime_checkable
class ProcessRunnerProtocol(Protocol):
    """Launches an external tool and waits for it to exit."""

    def run(
        self,
        executable: str,
        args: list[str],
        middleware: OutputMiddleware[Any] | None = None,
        tool: str = "",
    ) -> ProcessResult:
        """Run the tool, streaming its output through ``middleware``.

        Raises:
            LaunchFailureError: If the tool could not be started
        """
        ...


@runtime_checkable
class OutputSinkProtocol(Protocol):
    """Append-only sink for human-readable progress lines."""

    def write(self, text: str, style: str | None = None) -> None:
        """Append one line of progress output."""
        ...
