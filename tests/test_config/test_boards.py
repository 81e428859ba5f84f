"""Tests for board presets and board configuration loading."""

import sys

import pytest
import yaml

from mpybox.config.boards import (
    BUILTIN_BOARDS,
    available_boards,
    create_board_config,
    load_board_file,
)
from mpybox.core.errors import ConfigError, UnknownChipFamilyError
from mpybox.models.board import ChipFamily


class TestPresets:
    """Tests for built-in and user presets."""

    def test_builtin_presets(self):
        assert set(BUILTIN_BOARDS) == {"esp32", "esp8266", "k210"}

    @pytest.mark.parametrize("name", ["esp32", "esp8266"])
    def test_esp_presets(self, name):
        board = create_board_config(name)

        assert board.chip is ChipFamily(name)
        assert board.baud == 460800
        assert board.firmware == f"{name}-micropython.bin"

    @pytest.mark.parametrize(
        "platform,expected", [("linux", 1500000), ("win32", 1500000), ("darwin", 115200)]
    )
    def test_k210_baud_per_platform(self, monkeypatch, platform, expected):
        monkeypatch.setattr(sys, "platform", platform)

        board = create_board_config("k210")

        assert board.baud == expected
        assert board.board == "goE"

    def test_user_presets_merge_over_builtin(self):
        boards = available_boards(
            {"esp32": {"baud": 115200}, "m5stick": {"chip": "esp32", "baud": 1500000, "firmware": "m5.bin"}}
        )

        assert boards["esp32"]["baud"] == 115200
        assert boards["esp32"]["firmware"] == "esp32-micropython.bin"
        assert "m5stick" in boards
        # Built-ins are not modified
        assert BUILTIN_BOARDS["esp32"]["baud"] == 460800

    def test_user_preset_used(self):
        board = create_board_config(
            "m5stick",
            user_boards={"m5stick": {"chip": "esp32", "baud": 1500000, "firmware": "m5.bin"}},
        )
        assert board.firmware == "m5.bin"

    def test_unknown_preset(self):
        with pytest.raises(ConfigError, match="Unknown board preset 'pico'"):
            create_board_config("pico")


class TestOverrides:
    """Tests for option overrides."""

    def test_overrides_applied(self):
        board = create_board_config("esp32", baud=115200, rtsdtr=False)

        assert board.baud == 115200
        assert board.rtsdtr is False

    def test_none_overrides_ignored(self):
        board = create_board_config("esp32", baud=None, chip=None, rtsdtr=None)
        assert board.baud == 460800

    def test_chip_override_to_unknown_family(self):
        with pytest.raises(UnknownChipFamilyError):
            create_board_config("esp32", chip="avr")

    def test_invalid_result_is_config_error(self):
        with pytest.raises(ConfigError, match="Invalid board configuration"):
            create_board_config("esp32", chip="k210")

    def test_overrides_only(self):
        board = create_board_config(chip="esp8266", baud=74880, firmware="fw.bin")
        assert board.chip is ChipFamily.ESP8266


class TestBoardFile:
    """Tests for YAML board files."""

    def test_load_board_file(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "chip": "k210",
                    "baud": 115200,
                    "board": "dan",
                    "firmware": "maixpy.bin",
                    "slow_mode": True,
                }
            )
        )

        board = create_board_config(board_file=path)

        assert board.chip is ChipFamily.K210
        assert board.board == "dan"
        assert board.slow_mode is True

    def test_board_file_wins_over_preset(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text("chip: esp8266\nbaud: 115200\nfirmware: custom.bin\n")

        board = create_board_config("esp32", board_file=path)

        assert board.chip is ChipFamily.ESP8266

    def test_missing_board_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read board file"):
            load_board_file(tmp_path / "nope.yaml")

    def test_board_file_must_be_mapping(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text("just a string\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_board_file(path)

    def test_unknown_field_rejected(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text("chip: esp32\nbaud: 115200\nfirmware: fw.bin\nflash_mode: dio\n")

        with pytest.raises(ConfigError, match="Invalid board configuration"):
            create_board_config(board_file=path)
