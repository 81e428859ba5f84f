"""Tests for chip family and board configuration models."""

import sys

import pytest
from pydantic import ValidationError

from mpybox.core.errors import ConfigError, UnknownChipFamilyError
from mpybox.models.board import BoardConfig, ChipFamily, resolve_platform_value


class TestChipFamily:
    """Tests for ChipFamily dispatch properties."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("esp32", ChipFamily.ESP32),
            ("ESP8266", ChipFamily.ESP8266),
            (" k210 ", ChipFamily.K210),
            (ChipFamily.K210, ChipFamily.K210),
        ],
    )
    def test_from_name(self, name, expected):
        assert ChipFamily.from_name(name) is expected

    def test_from_name_unknown(self):
        with pytest.raises(UnknownChipFamilyError) as exc_info:
            ChipFamily.from_name("avr")

        assert exc_info.value.chip == "avr"
        assert isinstance(exc_info.value, ConfigError)

    def test_k210_behavior(self):
        chip = ChipFamily.K210

        assert chip.dense_packing
        assert chip.headroom_threshold == 100
        assert chip.needs_repl_abort
        assert chip.flash_root == "/flash"

    @pytest.mark.parametrize("chip", [ChipFamily.ESP32, ChipFamily.ESP8266])
    def test_esp_behavior(self, chip):
        assert not chip.dense_packing
        assert chip.headroom_threshold == 2
        assert not chip.needs_repl_abort
        assert chip.flash_root is None


class TestResolvePlatformValue:
    """Tests for resolve_platform_value."""

    def test_plain_value_unchanged(self):
        assert resolve_platform_value(115200) == 115200

    def test_picks_platform_entry(self):
        bauds = {"linux": 1500000, "darwin": 115200}
        assert resolve_platform_value(bauds, "darwin") == 115200

    def test_linux_variants_fall_back_to_linux(self):
        assert resolve_platform_value({"linux": 1500000}, "linux2") == 1500000

    def test_missing_platform(self):
        with pytest.raises(ValueError, match="No value for platform 'win32'"):
            resolve_platform_value({"linux": 1500000}, "win32")


class TestBoardConfig:
    """Tests for BoardConfig validation."""

    def test_defaults(self, esp32_board):
        assert esp32_board.rtsdtr is True
        assert esp32_board.rtsdtr_flag == "T"
        assert esp32_board.slow_mode is False
        assert esp32_board.board is None

    def test_rtsdtr_flag_disabled(self):
        board = BoardConfig(
            chip="esp32", baud=115200, firmware="fw.bin", rtsdtr=False
        )
        assert board.rtsdtr_flag == "F"

    def test_chip_from_string(self):
        board = BoardConfig(chip="ESP8266", baud=115200, firmware="fw.bin")
        assert board.chip is ChipFamily.ESP8266

    def test_unknown_chip_raises_named_error(self):
        with pytest.raises(UnknownChipFamilyError):
            BoardConfig(chip="rp2040", baud=115200, firmware="fw.bin")

    def test_k210_requires_board_id(self):
        with pytest.raises(ValidationError, match="board identifier"):
            BoardConfig(chip="k210", baud=1500000, firmware="fw.bin")

    def test_baud_must_be_positive(self):
        with pytest.raises(ValidationError):
            BoardConfig(chip="esp32", baud=0, firmware="fw.bin")

    def test_per_platform_baud_resolved(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "darwin")
        board = BoardConfig(
            chip="k210",
            baud={"linux": 1500000, "win32": 1500000, "darwin": 115200},
            board="goE",
            firmware="fw.bin",
        )
        assert board.baud == 115200

    def test_per_platform_baud_without_entry(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "sunos5")
        with pytest.raises(ValidationError, match="No value for platform"):
            BoardConfig(chip="esp32", baud={"linux": 460800}, firmware="fw.bin")

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            BoardConfig(chip="esp32", baud=115200, firmware="fw.bin", speed=3)

    def test_immutable(self, esp32_board):
        with pytest.raises(ValidationError):
            esp32_board.baud = 9600  # type: ignore[misc]
