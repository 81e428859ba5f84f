"""User-facing progress output.

Sinks receive human-readable progress lines: passthrough output of flashing
tools and status lines narrated by the provisioning flow.
"""

from rich.console import Console
from rich.markup import escape

from mpybox.core.structlog_logger import get_struct_logger
from mpybox.protocols.process_protocols import OutputSinkProtocol
from mpybox.utils.stream_process import OutputMiddleware


logger = get_struct_logger(__name__)


class Styles:
    """Styles used for narrated status lines."""

    WARNING = "yellow"
    SUCCESS = "bold green"
    ERROR = "bold red"
    MUTED = "dim"


class ConsoleOutputSink:
    """Write progress lines to a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    def write(self, text: str, style: str | None = None) -> None:
        # Tool output may contain square brackets that Rich would parse as markup
        self.console.print(escape(text.rstrip("\n")), style=style, soft_wrap=True)


class BufferedOutputSink:
    """Collect progress lines in memory."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.styled: list[tuple[str, str | None]] = []

    def write(self, text: str, style: str | None = None) -> None:
        line = text.rstrip("\n")
        self.lines.append(line)
        self.styled.append((line, style))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class SinkOutputMiddleware(OutputMiddleware[str]):
    """Forward a tool's stdout to a sink as it is produced.

    stderr is kept out of the sink and only logged.
    """

    def __init__(self, sink: OutputSinkProtocol) -> None:
        self.sink = sink

    def process(self, line: str, stream_type: str) -> str:
        if stream_type == "stdout":
            self.sink.write(line)
        else:
            logger.debug("tool_stderr", line=line)
        return line

