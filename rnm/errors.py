"""Exceptions raised by the rename engine."""

from rnm.models.history import HistoryEntry


class RnmError(Exception):
    """Base class for all rnm errors."""


class PatternError(RnmError):
    """A regular expression could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regular expression '{pattern}': {reason}")


class ValidationError(RnmError):
    """One or more renames in a batch failed pre-execution checks.

    All problems are collected so they can be reported together.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Validation failed:\n" + "\n".join(f"  - {problem}" for problem in self.problems))


class ExecutionError(RnmError):
    """A single filesystem rename failed part way through a batch.

    Renames listed in `completed` were applied before the failure and remain applied.
    """

    def __init__(
        self, original_name: str, new_name: str, cause: Exception, completed: list[HistoryEntry] | None = None
    ) -> None:
        self.original_name = original_name
        self.new_name = new_name
        self.cause = cause
        self.completed = list(completed or [])
        super().__init__(f"Failed to rename '{original_name}' to '{new_name}': {cause}")


class HistoryError(RnmError):
    """The history or config store could not be read or written."""


class NothingToUndoError(RnmError):
    """The history is empty."""

    def __init__(self) -> None:
        super().__init__("Nothing to undo.")


class UndoError(RnmError):
    """No entry of the undone operation could be restored."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Undo failed:\n" + "\n".join(f"  - {problem}" for problem in self.problems))
