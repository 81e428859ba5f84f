from .errors import (
    ConfigError,
    FirmwareNotFoundError,
    FlashError,
    LaunchFailureError,
    MpyboxError,
    NonZeroExitError,
    ProcessError,
    ProcessTimeoutError,
    ProtocolParseError,
    UnknownChipFamilyError,
    UploadError,
)
from .logging import get_logger, setup_logging


__all__ = [
    "setup_logging",
    "get_logger",
    "MpyboxError",
    "ConfigError",
    "UnknownChipFamilyError",
    "ProcessError",
    "LaunchFailureError",
    "NonZeroExitError",
    "ProcessTimeoutError",
    "ProtocolParseError",
    "FlashError",
    "FirmwareNotFoundError",
    "UploadError",
]
