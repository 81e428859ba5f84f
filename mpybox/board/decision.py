"""Decide whether the board needs a firmware reflash before writing files."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mpybox.models.board import ChipFamily
from mpybox.models.manifest import FileManifest
from mpybox.models.space import (
    ExistingFileTracker,
    SpaceState,
    remaining_capacity,
    required_units,
)


def file_size(path: Path) -> int:
    return path.stat().st_size


@dataclass(frozen=True)
class SpaceDecision:
    """Space accounting behind a reflash decision, in the chip's units."""

    required: int
    capacity: int
    threshold: int

    @property
    def headroom(self) -> int:
        return self.capacity - self.required

    @property
    def reflash(self) -> bool:
        return self.headroom < self.threshold


def files_to_write(
    manifest: FileManifest, existing_files: ExistingFileTracker
) -> list[Path]:
    """Manifest files that will be written: the entry file and any library
    not already on the board."""
    return [
        path
        for path in manifest
        if manifest.is_entry(path) or not existing_files.is_present(path.name)
    ]


def evaluate_space(
    manifest: FileManifest,
    existing_files: ExistingFileTracker,
    space: SpaceState,
    chip: ChipFamily,
    size_of: Callable[[Path], int] = file_size,
) -> SpaceDecision:
    """Compare the space the pending writes need with what the board has.

    Raises:
        ValueError: If ``space`` is unresolved
    """
    if not space.is_resolved:
        raise ValueError("space state is unresolved (block size is zero)")

    required = sum(
        required_units(size_of(path), chip, space.block_size)
        for path in files_to_write(manifest, existing_files)
    )
    return SpaceDecision(
        required=required,
        capacity=remaining_capacity(space, chip),
        threshold=chip.headroom_threshold,
    )


def should_reflash(
    manifest: FileManifest,
    existing_files: ExistingFileTracker,
    space: SpaceState,
    chip: ChipFamily,
    size_of: Callable[[Path], int] = file_size,
) -> bool:
    """Whether writing the manifest would leave less than the chip's headroom."""
    return evaluate_space(manifest, existing_files, space, chip, size_of).reflash
