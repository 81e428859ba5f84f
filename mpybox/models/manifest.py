"""File manifest for one provisioning run."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from mpybox.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)

# Name the board's runtime executes on boot
ENTRY_FILE_NAME = "main.py"


@dataclass(frozen=True)
class FileManifest:
    """Ordered set of files to write to the board.

    The program entry file always comes first, followed by library files in
    the order they were discovered.
    """

    entry: Path
    libraries: tuple[Path, ...] = field(default_factory=tuple)

    @property
    def files(self) -> list[Path]:
        return [self.entry, *self.libraries]

    def is_entry(self, path: Path) -> bool:
        """Whether ``path`` is the program entry file."""
        return path == self.entry

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files)

    def __len__(self) -> int:
        return 1 + len(self.libraries)


def scan_library_dirs(library_dirs: Iterable[str | Path]) -> list[Path]:
    """Collect library files from each directory, one level deep.

    Missing directories and subdirectories are skipped. A library file named
    like the entry file would replace the user program on the board, so it
    is ignored.
    """
    found: list[Path] = []
    for lib_dir in library_dirs:
        lib_path = Path(lib_dir).expanduser().resolve()
        if not lib_path.is_dir():
            logger.debug("library_dir_missing", path=str(lib_path))
            continue

        for candidate in sorted(lib_path.iterdir()):
            if not candidate.is_file():
                continue
            if candidate.name == ENTRY_FILE_NAME:
                logger.warning("library_entry_name_ignored", path=str(candidate))
                continue
            found.append(candidate)

    return found


def build_manifest(
    entry_file: str | Path, library_dirs: Iterable[str | Path] = ()
) -> FileManifest:
    """Build the manifest for an entry file and library directories."""
    entry = Path(entry_file).expanduser().resolve()
    libraries = tuple(scan_library_dirs(library_dirs))
    logger.debug(
        "manifest_built", entry=str(entry), library_count=len(libraries)
    )
    return FileManifest(entry=entry, libraries=libraries)
