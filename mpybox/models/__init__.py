"""Models package for mpybox."""

from mpybox.models.base import MpyboxBaseModel
from mpybox.models.board import BoardConfig, ChipFamily, resolve_platform_value
from mpybox.models.manifest import (
    ENTRY_FILE_NAME,
    FileManifest,
    build_manifest,
    scan_library_dirs,
)
from mpybox.models.results import BaseResult, ProvisionResult
from mpybox.models.space import (
    ExistingFileTracker,
    SpaceState,
    remaining_capacity,
    required_units,
)


__all__ = [
    "MpyboxBaseModel",
    "BaseResult",
    "ProvisionResult",
    "BoardConfig",
    "ChipFamily",
    "resolve_platform_value",
    "ENTRY_FILE_NAME",
    "FileManifest",
    "build_manifest",
    "scan_library_dirs",
    "ExistingFileTracker",
    "SpaceState",
    "remaining_capacity",
    "required_units",
]
