"""Undo of the most recent rename operation."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from rnm.errors import NothingToUndoError, UndoError
from rnm.models.history import RenameOperation
from rnm.processors.collision import DEFAULT_COLLISION_STRATEGY, CollisionStrategy
from rnm.storage import HistoryStore


logger = logging.getLogger(__name__)


@dataclass
class UndoResult:
    """Outcome of an undo. Skipped or failed entries are listed in `problems`."""

    directory: Path
    description: str = ""
    undone_count: int = 0
    problems: list[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.problems)


def undo_preview(history_store: HistoryStore) -> RenameOperation | None:
    """The operation the next undo would reverse, if any."""
    return history_store.peek()


def _restore_entries(operation: RenameOperation, collision_strategy: CollisionStrategy) -> UndoResult:
    result = UndoResult(directory=operation.directory, description=operation.description)

    # Newest rename first, so chains unwind in the opposite order they were applied
    for entry in reversed(operation.entries):
        current = operation.directory / entry.new_name
        original = operation.directory / entry.original_name

        if not current.exists():
            result.problems.append(f"File no longer exists: {entry.new_name} (skipped)")
            continue

        if collision_strategy.is_collision(current, original):
            result.problems.append(f"Original name already taken: {entry.original_name} (skipped)")
            continue

        try:
            os.rename(current, original)
        except (OSError, ValueError) as e:
            result.problems.append(f"Failed to restore '{entry.new_name}': {e}")
            continue

        result.undone_count += 1
        logger.debug("Restored %s -> %s", entry.new_name, entry.original_name)

    return result


def undo_last(history_store: HistoryStore, collision_strategy: CollisionStrategy | None = None) -> UndoResult:
    """Reverse the most recent rename operation as far as possible.

    Entries that cannot be restored are skipped individually. The operation is removed
    from the history once the undo has been attempted, however many entries succeeded.

    Args:
        history_store: History to take the operation from.
        collision_strategy: Existing-destination check. Defaults to asking the filesystem.

    Returns:
        UndoResult with the number of restored files and the problems encountered.

    Raises:
        NothingToUndoError: If the history is empty.
        UndoError: If nothing could be restored and at least one problem occurred.
        HistoryError: If the history cannot be read or written.
    """
    history = history_store.load()
    operation = history.pop()
    if operation is None:
        raise NothingToUndoError()

    result = _restore_entries(operation, collision_strategy or DEFAULT_COLLISION_STRATEGY)
    history_store.save(history)

    logger.debug(
        "Undo of '%s' in %s restored %d of %d file(s)",
        operation.description,
        operation.directory,
        result.undone_count,
        len(operation.entries),
    )

    if result.undone_count == 0 and result.problems:
        raise UndoError(result.problems)
    return result
