"""Directory enumeration and sorting."""

import logging
from collections.abc import Callable
from pathlib import Path

from rnm.models.rename import FileEntry, SortOrder


logger = logging.getLogger(__name__)

GLOB_CHARACTERS = frozenset("*?[")


def split_glob(target: str) -> tuple[Path, str | None]:
    """Split a command line target into a directory and an optional glob pattern.

    `photos/*.jpg` becomes `(Path("photos"), "*.jpg")`; a plain directory has no pattern.
    """
    if not any(char in target for char in GLOB_CHARACTERS):
        return Path(target), None
    path = Path(target)
    return path.parent, path.name


def _sort_key(sort_order: SortOrder) -> Callable[[FileEntry], tuple]:
    if sort_order is SortOrder.EXTENSION:
        return lambda f: (not f.is_directory, f.extension.lower(), f.name.lower())
    if sort_order is SortOrder.SIZE:
        return lambda f: (not f.is_directory, f.size, f.name.lower())
    if sort_order is SortOrder.MODIFIED:
        return lambda f: (not f.is_directory, f.modified_time or 0.0, f.name.lower())
    return lambda f: (not f.is_directory, f.name.lower())


def sort_files(files: list[FileEntry], sort_order: SortOrder = SortOrder.NAME) -> list[FileEntry]:
    """Return a new list sorted by `sort_order`, directories first."""
    return sorted(files, key=_sort_key(sort_order))


def load_files(
    directory: Path,
    pattern: str | None = None,
    sort_order: SortOrder = SortOrder.NAME,
    include_hidden: bool = False,
) -> list[FileEntry]:
    """List the entries of a single directory.

    Args:
        directory: Directory to list. Not searched recursively.
        pattern: Optional glob pattern such as `*.jpg`. Only files are returned when given.
        sort_order: Order of the returned entries.
        include_hidden: Whether to include names starting with a dot.

    Returns:
        FileEntry snapshots. Directories are included (unless a pattern is given)
        so callers can show them, but they are never renamed.

    Raises:
        NotADirectoryError: If `directory` is not an existing directory.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    paths = sorted(directory.glob(pattern)) if pattern else sorted(directory.iterdir())

    files: list[FileEntry] = []
    for path in paths:
        if not include_hidden and path.name.startswith("."):
            continue
        if pattern and not path.is_file():
            continue
        try:
            files.append(FileEntry.from_path(path))
        except OSError as e:
            logger.warning("Skipping %s: %s", path, e)

    logger.debug("Loaded %d entries from %s", len(files), directory)
    return sort_files(files, sort_order)
