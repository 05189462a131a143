"""Validation and execution of rename batches.

A batch moves through three states. `RenameBatch` holds unvalidated previews;
`RenameBatch.validate()` checks every rename against the filesystem and returns a
`ValidatedBatch`, the only object that can touch the filesystem; executing it
returns an `ExecutionResult`.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from rnm.errors import ExecutionError, HistoryError, ValidationError
from rnm.models.history import HistoryEntry, RenameOperation
from rnm.models.rename import RenamePreview
from rnm.processors.collision import DEFAULT_COLLISION_STRATEGY, CollisionStrategy
from rnm.storage import HistoryStore


logger = logging.getLogger(__name__)

PATH_SEPARATORS = ("/", "\\")

# Rejected by the OS in any filename
NUL = "\x00"

DEFAULT_DESCRIPTION = "Rename"


@dataclass
class ExecutionResult:
    """Renames applied by an executed batch."""

    directory: Path
    renamed: list[HistoryEntry] = field(default_factory=list)

    @property
    def renamed_count(self) -> int:
        return len(self.renamed)

    def summary(self) -> str:
        lines = [f"Renamed {self.renamed_count} file(s) in {self.directory}:"]
        lines.extend(f"  {entry.original_name} -> {entry.new_name}" for entry in self.renamed)
        return "\n".join(lines)


class RenameBatch:
    """Previews awaiting validation."""

    def __init__(
        self,
        previews: list[RenamePreview],
        directory: Path,
        collision_strategy: CollisionStrategy | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.previews = list(previews)
        self.collision_strategy = collision_strategy or DEFAULT_COLLISION_STRATEGY

    @property
    def changes(self) -> list[RenamePreview]:
        return [preview for preview in self.previews if preview.will_change]

    def check(self) -> list[str]:
        """Return every problem found in the batch, without raising."""
        problems: list[str] = []
        destinations: dict[str, str] = {}

        for preview in self.changes:
            if not preview.new_name:
                problems.append(f"Empty filename is not allowed (from '{preview.original_name}')")
                continue

            if any(separator in preview.new_name for separator in PATH_SEPARATORS):
                problems.append(f"Invalid filename, contains a path separator: {preview.new_name}")
                continue

            if NUL in preview.new_name:
                problems.append(f"Invalid filename, contains a NUL character: {preview.new_name!r}")
                continue

            source = self.directory / preview.original_name
            destination = self.directory / preview.new_name

            if not source.exists():
                problems.append(f"Source file does not exist: {preview.original_name}")
                continue

            if self.collision_strategy.is_collision(source, destination):
                problems.append(f"Target file already exists: {preview.new_name}")
                continue

            claimed_by = destinations.setdefault(preview.new_name, preview.original_name)
            if claimed_by != preview.original_name:
                problems.append(
                    f"Both '{claimed_by}' and '{preview.original_name}' would be renamed to '{preview.new_name}'"
                )

        return problems

    def validate(self) -> "ValidatedBatch":
        """Check the whole batch.

        Raises:
            ValidationError: Listing every problem found. Nothing has been renamed.
        """
        problems = self.check()
        if problems:
            logger.debug("Batch in %s rejected with %d problem(s)", self.directory, len(problems))
            raise ValidationError(problems)
        return ValidatedBatch(self, _token=_VALIDATED)


_VALIDATED = object()


class ValidatedBatch:
    """A batch that passed validation and can be executed exactly once."""

    def __init__(self, batch: RenameBatch, _token: object = None) -> None:
        if _token is not _VALIDATED:
            raise TypeError("ValidatedBatch is created by RenameBatch.validate()")
        self.directory = batch.directory
        self.changes = batch.changes
        self._collision_strategy = batch.collision_strategy
        self._executed = False

    def execute(self) -> ExecutionResult:
        """Apply the renames in batch order.

        Raises:
            ExecutionError: If a rename fails. Renames before it stay applied and are
                listed in the error's `completed` attribute.
            RuntimeError: If the batch was already executed.
        """
        if self._executed:
            raise RuntimeError("Batch has already been executed")
        self._executed = True

        result = ExecutionResult(directory=self.directory)
        for preview in self.changes:
            source = self.directory / preview.original_name
            destination = self.directory / preview.new_name
            try:
                # os.rename replaces an existing destination on POSIX
                if self._collision_strategy.is_collision(source, destination):
                    raise FileExistsError(f"Target file already exists: {destination}")
                os.rename(source, destination)
            except (OSError, ValueError) as e:
                raise ExecutionError(preview.original_name, preview.new_name, e, completed=result.renamed) from e
            result.renamed.append(HistoryEntry(original_name=preview.original_name, new_name=preview.new_name))

        return result


def record_history(history_store: HistoryStore, result: ExecutionResult, description: str) -> None:
    """Append an executed batch to the history. Storage failures are logged and ignored."""
    if not result.renamed:
        return
    operation = RenameOperation.create(result.directory, result.renamed, description)
    try:
        history_store.push(operation)
    except HistoryError as e:
        logger.debug("Could not record rename history: %s", e)


def execute_renames(
    previews: list[RenamePreview],
    directory: Path,
    history_store: HistoryStore | None = None,
    description: str = DEFAULT_DESCRIPTION,
    collision_strategy: CollisionStrategy | None = None,
) -> int:
    """Validate and apply a batch of renames, then record it in the history.

    Args:
        previews: Previews to apply. Only those with `will_change` are renamed.
        directory: Directory containing the files.
        history_store: Where to record the applied renames. None skips recording.
        description: Free text stored with the history entry.
        collision_strategy: Existing-destination check. Defaults to asking the filesystem.

    Returns:
        Number of files renamed.

    Raises:
        ValidationError: If any rename fails validation. Nothing is renamed.
        ExecutionError: If a rename fails part way through.
    """
    validated = RenameBatch(previews, directory, collision_strategy).validate()
    result = validated.execute()
    logger.debug(result.summary())
    if history_store is not None:
        record_history(history_store, result, description)
    return result.renamed_count
