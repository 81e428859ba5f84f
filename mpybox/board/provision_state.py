"""Provisioning run state."""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from mpybox.models.manifest import FileManifest
from mpybox.models.space import ExistingFileTracker, SpaceState


class ProvisionState(str, Enum):
    """States of a provisioning run."""

    IDLE = "idle"
    DISCOVERING_REPL = "discovering_repl"
    CHECKING_SPACE = "checking_space"
    REFLASHING_FIRMWARE = "reflashing_firmware"
    WRITING_FILES = "writing_files"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProvisionState.DONE, ProvisionState.FAILED)


@dataclass
class ProvisionContext:
    """Everything a provisioning run knows about the board.

    Passed through each transition so a run can be started from any state
    with any prior knowledge of the board.
    """

    manifest: FileManifest
    state: ProvisionState = ProvisionState.IDLE

    # Board knowledge, trusted only until the next reflash or write
    existing_files: ExistingFileTracker = field(default_factory=ExistingFileTracker)
    space: SpaceState | None = None

    # Runtime state
    history: list[ProvisionState] = field(default_factory=list)
    reflashed: bool = False
    reflash_reason: str | None = None
    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    error: Exception | None = None
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    @property
    def succeeded(self) -> bool:
        return self.state is ProvisionState.DONE

    @property
    def failed(self) -> bool:
        return self.state is ProvisionState.FAILED

    def invalidate_board_knowledge(self) -> None:
        """Forget the listing and free space, e.g. after a reflash."""
        self.existing_files.reset()
        self.space = None
