"""Board filesystem space accounting."""

from collections.abc import Iterable, Iterator

from pydantic import ConfigDict, Field

from mpybox.models.base import MpyboxBaseModel
from mpybox.models.board import ChipFamily


class SpaceState(MpyboxBaseModel):
    """Free space as last reported by the board.

    A state whose block size is not positive is unresolved: it carries no
    usable capacity information and must not be used for accounting.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    block_size: int = Field(alias="bsize", ge=0)
    free_blocks: int = Field(alias="bfree")

    @property
    def is_resolved(self) -> bool:
        return self.block_size > 0

    @property
    def free_bytes(self) -> int:
        return self.free_blocks * self.block_size


def required_units(size: int, chip: ChipFamily, block_size: int) -> int:
    """Space a file of ``size`` bytes occupies on the board.

    Densely packed families count raw bytes; block families round up to
    whole blocks.

    Raises:
        ValueError: If a block family is given a non-positive block size
    """
    if chip.dense_packing:
        return size
    if block_size <= 0:
        raise ValueError(f"block size must be positive, got {block_size}")
    return -(-size // block_size)


def remaining_capacity(space: SpaceState, chip: ChipFamily) -> int:
    """Free capacity in the same units ``required_units`` returns."""
    if chip.dense_packing:
        return space.free_bytes
    return space.free_blocks


class ExistingFileTracker:
    """Filenames last reported present on the board's filesystem."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: set[str] = set()
        self.update(names)

    def update(self, names: Iterable[str]) -> None:
        """Replace the tracked listing with ``names``."""
        self._names = {name for name in names if name}

    def is_present(self, filename: str) -> bool:
        return filename in self._names

    def reset(self) -> None:
        """Forget the listing, e.g. after the filesystem was erased."""
        self._names.clear()

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __repr__(self) -> str:
        return f"ExistingFileTracker({sorted(self._names)!r})"
