"""Core test fixtures for the mpybox project."""

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from typer.testing import CliRunner

from mpybox.config.models import UserConfigData
from mpybox.models.board import BoardConfig, ChipFamily
from mpybox.models.manifest import ENTRY_FILE_NAME, FileManifest, build_manifest
from mpybox.utils.output_sink import BufferedOutputSink
from mpybox.utils.stream_process import OutputMiddleware, ProcessResult


# Subcommands that identify which tool invocation a scripted response is for
SCRIPTED_COMMANDS = ("ls", "restspace", "put", "erase_flash", "write_flash")

PORT = "/dev/ttyUSB0"


def command_key(args: list[str]) -> str:
    """Name the tool invocation an argument list represents."""
    for command in SCRIPTED_COMMANDS:
        if command in args:
            return command
    if args and args[0] == "-mkflash":
        return "kflash"
    return "unknown"


class FakeProcessRunner:
    """Process runner that records invocations and replays scripted results.

    Responses are queued per command key. The last response queued for a key
    is repeated once the queue is drained; unscripted commands succeed with no
    output. A response is either ``(return_code, stdout_lines)`` or an
    exception instance to raise.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.tools: list[str] = []
        self._responses: dict[str, list[Any]] = {}

    def script(self, command: str, *responses: Any) -> "FakeProcessRunner":
        self._responses.setdefault(command, []).extend(responses)
        return self

    def run(
        self,
        executable: str,
        args: list[str],
        middleware: OutputMiddleware[Any] | None = None,
        tool: str = "",
    ) -> ProcessResult:
        self.calls.append([executable, *args])
        self.tools.append(tool)

        queue = self._responses.get(command_key(args), [])
        response: Any = (0, [])
        if len(queue) > 1:
            response = queue.pop(0)
        elif queue:
            response = queue[0]

        if isinstance(response, Exception):
            raise response

        return_code, lines = response
        stdout = []
        for line in lines:
            processed = middleware.process(line, "stdout") if middleware else line
            if processed is not None:
                stdout.append(processed)
        return ProcessResult(return_code, stdout, [])

    def calls_for(self, command: str) -> list[list[str]]:
        return [call for call in self.calls if command_key(call[1:]) == command]

    @property
    def commands(self) -> list[str]:
        return [command_key(call[1:]) for call in self.calls]


# ---- Test Isolation Fixtures ----


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Keep user config files, MPYBOX_ variables and logging state out of tests."""
    import os

    for name in list(os.environ):
        if name.upper().startswith("MPYBOX_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg_config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg_data"))
    monkeypatch.chdir(tmp_path)

    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level
    yield
    root_logger.handlers = saved_handlers
    root_logger.setLevel(saved_level)
    structlog.reset_defaults()


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_runner() -> FakeProcessRunner:
    return FakeProcessRunner()


@pytest.fixture
def output_sink() -> BufferedOutputSink:
    return BufferedOutputSink()


@pytest.fixture
def port() -> str:
    return PORT


# ---- Board Fixtures ----


@pytest.fixture
def esp32_board() -> BoardConfig:
    return BoardConfig(
        chip=ChipFamily.ESP32, baud=460800, firmware="esp32-micropython.bin"
    )


@pytest.fixture
def esp8266_board() -> BoardConfig:
    return BoardConfig(
        chip=ChipFamily.ESP8266, baud=460800, firmware="esp8266-micropython.bin"
    )


@pytest.fixture
def k210_board() -> BoardConfig:
    return BoardConfig(
        chip=ChipFamily.K210,
        baud=1500000,
        board="goE",
        firmware="k210-micropython.bin",
    )


# ---- Project Fixtures ----


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project directory holding a 50 byte entry file."""
    directory = tmp_path / "project"
    directory.mkdir()
    (directory / ENTRY_FILE_NAME).write_text("x" * 50)
    return directory


@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    """Library directory holding one 30 byte module."""
    directory = tmp_path / "lib"
    directory.mkdir()
    (directory / "helpers.py").write_text("y" * 30)
    return directory


@pytest.fixture
def manifest(project_dir: Path, library_dir: Path) -> FileManifest:
    return build_manifest(project_dir / ENTRY_FILE_NAME, [library_dir])


@pytest.fixture
def firmware_dir(tmp_path: Path) -> Path:
    """Firmware directory with an image for every built-in board."""
    directory = tmp_path / "firmwares"
    directory.mkdir()
    for name in (
        "esp32-micropython.bin",
        "esp8266-micropython.bin",
        "k210-micropython.bin",
    ):
        (directory / name).write_bytes(b"\x00" * 16)
    return directory


@pytest.fixture
def user_config_data(tmp_path: Path, firmware_dir: Path) -> UserConfigData:
    return UserConfigData(
        python_path="python",
        firmware_dir=firmware_dir,
        project_dir=tmp_path / "staging",
    )
