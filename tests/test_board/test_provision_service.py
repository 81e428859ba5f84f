"""Tests for ProvisionService."""

from unittest.mock import Mock, patch

import pytest

from mpybox.board.service import ProvisionService, create_provision_service
from mpybox.config.models import UserConfigData
from mpybox.core.errors import (
    ConfigError,
    FirmwareNotFoundError,
    FlashError,
    UnknownChipFamilyError,
)
from mpybox.models.board import BoardConfig
from mpybox.utils.output_sink import ConsoleOutputSink
from mpybox.utils.stream_process import SubprocessRunner


PORT = "/dev/ttyUSB0"
CODE = "import machine\nprint('hello')\n"


@pytest.fixture
def service(user_config_data, fake_runner, output_sink) -> ProvisionService:
    return ProvisionService(
        config=user_config_data, runner=fake_runner, sink=output_sink
    )


class TestProvisionService:
    """Tests for ProvisionService.provision."""

    def test_stages_entry_file(self, service, user_config_data, fake_runner, esp32_board):
        fake_runner.script("restspace", (0, ["{'bsize': 4096, 'bfree': 100}"]))

        service.provision(esp32_board, PORT, CODE)

        entry = user_config_data.project_dir / "main.py"
        assert entry.read_text() == CODE
        assert fake_runner.calls_for("put")[0][-1] == str(entry.resolve())

    def test_successful_result(
        self, service, fake_runner, esp32_board, library_dir
    ):
        fake_runner.script("ls", (0, ["helpers.py"]))
        fake_runner.script("restspace", (0, ["{'bsize': 4096, 'bfree': 100}"]))

        result = service.provision(esp32_board, PORT, CODE, [library_dir])

        assert result.success
        assert result.final_state == "done"
        assert not result.reflashed
        assert len(result.files_written) == 1
        assert result.files_written[0].endswith("main.py")
        assert result.files_skipped == [str((library_dir / "helpers.py").resolve())]
        assert "Skipped 1 file(s) already on the board" in result.messages

    def test_reflash_reported(self, service, fake_runner, esp32_board, library_dir):
        fake_runner.script("ls", (1, []))

        result = service.provision(esp32_board, PORT, CODE, [library_dir])

        assert result.success
        assert result.reflashed
        assert result.reflash_reason == "raw REPL unavailable"
        assert len(result.files_written) == 2
        assert "Firmware reflash triggered: raw REPL unavailable" in result.messages

    def test_failure_result(self, service, fake_runner, esp32_board):
        fake_runner.script("ls", (1, []))
        fake_runner.script("write_flash", (1, []))

        result = service.provision(esp32_board, PORT, CODE)

        assert not result.success
        assert result.final_state == "failed"
        assert result.errors == ["esptool failed to flash (exit code 1)"]
        assert result.files_written == []

    def test_firmware_path_from_config(self, service, firmware_dir, k210_board):
        assert service.firmware_path(k210_board) == (
            firmware_dir / "k210-micropython.bin"
        )

    def test_unknown_chip_rejected_before_staging(
        self, service, user_config_data, esp32_board
    ):
        with patch(
            "mpybox.board.service.create_firmware_flasher",
            side_effect=UnknownChipFamilyError("avr"),
        ):
            with pytest.raises(UnknownChipFamilyError):
                service.provision(esp32_board, PORT, CODE)

        assert not (user_config_data.project_dir / "main.py").exists()

    def test_unwritable_project_dir(self, fake_runner, output_sink, tmp_path, esp32_board):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config = UserConfigData(python_path="python", project_dir=blocker / "project")
        service = ProvisionService(config=config, runner=fake_runner, sink=output_sink)

        with pytest.raises(ConfigError, match="Cannot stage program"):
            service.provision(esp32_board, PORT, CODE)


class TestDirectOperations:
    """Board operations exposed for the CLI."""

    def test_list_files(self, service, fake_runner, esp32_board):
        fake_runner.script("ls", (0, ["boot.py", "main.py"]))
        assert service.list_files(esp32_board, PORT) == ["boot.py", "main.py"]

    def test_rest_space(self, service, fake_runner, esp32_board):
        fake_runner.script("restspace", (0, ["{'bsize': 4096, 'bfree': 7}"]))
        assert service.rest_space(esp32_board, PORT).free_blocks == 7

    def test_flash_firmware(self, service, fake_runner, esp8266_board, firmware_dir):
        firmware = service.flash_firmware(esp8266_board, PORT)

        assert firmware == firmware_dir / "esp8266-micropython.bin"
        assert fake_runner.commands == ["erase_flash", "write_flash"]

    def test_flash_firmware_missing_image(self, service, fake_runner):
        board = BoardConfig(chip="esp32", baud=115200, firmware="custom.bin")

        with pytest.raises(FirmwareNotFoundError):
            service.flash_firmware(board, PORT)

        assert fake_runner.calls == []

    def test_flash_firmware_failure(self, service, fake_runner, k210_board):
        fake_runner.script("kflash", (1, []))

        with pytest.raises(FlashError):
            service.flash_firmware(k210_board, PORT)


class TestFactory:
    """Tests for create_provision_service."""

    def test_defaults(self):
        service = create_provision_service()

        assert isinstance(service, ProvisionService)
        assert isinstance(service.runner, SubprocessRunner)
        assert isinstance(service.sink, ConsoleOutputSink)
        assert service.runner.timeout is None

    def test_timeout_from_config(self):
        config = UserConfigData(process_timeout=90)
        service = create_provision_service(config=config)

        assert service.runner.timeout == 90

    def test_injected_collaborators(self, user_config_data):
        runner = Mock()
        sink = Mock()

        service = create_provision_service(
            config=user_config_data, runner=runner, sink=sink
        )

        assert service.runner is runner
        assert service.sink is sink
        assert service.repl.start_delay == user_config_data.start_delay
