"""Board and chip family models."""

import sys
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, field_validator, model_validator

from mpybox.core.errors import UnknownChipFamilyError
from mpybox.models.base import MpyboxBaseModel


class ChipFamily(str, Enum):
    """Chip families mpybox can provision.

    Chip-specific behavior hangs off this enum so callers never compare
    family names themselves.
    """

    ESP32 = "esp32"
    ESP8266 = "esp8266"
    K210 = "k210"

    @classmethod
    def from_name(cls, value: "str | ChipFamily") -> "ChipFamily":
        """Resolve a chip family from its name.

        Raises:
            UnknownChipFamilyError: If the name is not a supported family
        """
        if isinstance(value, ChipFamily):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownChipFamilyError(str(value)) from None

    @property
    def dense_packing(self) -> bool:
        """Whether files are stored byte-packed rather than block-quantized."""
        return self is ChipFamily.K210

    @property
    def headroom_threshold(self) -> int:
        """Minimum free space to keep after writing, in the family's units.

        Bytes for densely packed families, blocks otherwise.
        """
        return 100 if self.dense_packing else 2

    @property
    def needs_repl_abort(self) -> bool:
        """Whether the raw REPL must be interrupted once before each command."""
        return self is ChipFamily.K210

    @property
    def flash_root(self) -> str | None:
        """Filesystem root to query for free space, when not the default."""
        return "/flash" if self is ChipFamily.K210 else None


def resolve_platform_value(value: Any, platform: str | None = None) -> Any:
    """Pick the entry for the host platform from a per-platform mapping.

    Non-mapping values are returned unchanged.

    Args:
        value: Plain value or mapping of platform name to value
        platform: Platform name, defaults to ``sys.platform``

    Raises:
        ValueError: If the mapping has no entry for the platform
    """
    if not isinstance(value, dict):
        return value

    platform = platform or sys.platform
    if platform in value:
        return value[platform]
    if platform.startswith("linux") and "linux" in value:
        return value["linux"]
    raise ValueError(
        f"No value for platform '{platform}' (available: {', '.join(sorted(value))})"
    )


class BoardConfig(MpyboxBaseModel):
    """Static description of the board being provisioned.

    Immutable for the lifetime of a provisioning run.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    chip: ChipFamily
    baud: int = Field(gt=0, description="Serial baud rate for firmware flashing")
    rtsdtr: bool = Field(
        default=True, description="Toggle RTS/DTR to reset the board on connect"
    )
    board: str | None = Field(
        default=None, description="kflash board identifier (k210 only)"
    )
    firmware: str = Field(description="Firmware image filename")
    slow_mode: bool = Field(
        default=False, description="Use kflash slow mode (k210 only)"
    )

    @field_validator("chip", mode="before")
    @classmethod
    def validate_chip(cls, v: Any) -> ChipFamily:
        """Resolve chip family names, raising UnknownChipFamilyError if unknown."""
        return ChipFamily.from_name(v)

    @field_validator("baud", mode="before")
    @classmethod
    def resolve_baud(cls, v: Any) -> Any:
        """Resolve per-platform baud rates for the host platform."""
        return resolve_platform_value(v)

    @model_validator(mode="after")
    def validate_k210_board(self) -> "BoardConfig":
        """A kflash board identifier is required for k210 boards."""
        if self.chip is ChipFamily.K210 and not self.board:
            raise ValueError("k210 boards require a board identifier")
        return self

    @property
    def rtsdtr_flag(self) -> str:
        """Reset-control flag in the form the transfer tool expects."""
        return "T" if self.rtsdtr else "F"
