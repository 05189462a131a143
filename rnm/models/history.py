"""Rename history data models."""

import time
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    """A single applied rename."""

    model_config = ConfigDict(frozen=True)

    original_name: str = Field(description="Filename before the rename")
    new_name: str = Field(description="Filename after the rename")


class RenameOperation(BaseModel):
    """A batch of renames that was applied together."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(description="Seconds since the epoch when the batch was applied")
    directory: Path = Field(description="Directory the renames happened in")
    entries: tuple[HistoryEntry, ...] = Field(default=())
    description: str = Field(default="")

    @classmethod
    def create(cls, directory: Path, entries: list[HistoryEntry], description: str) -> "RenameOperation":
        """Create an operation stamped with the current time."""
        return cls(timestamp=int(time.time()), directory=directory, entries=tuple(entries), description=description)

    def __str__(self) -> str:
        return f"RenameOperation('{self.description}', directory='{self.directory}', entries={len(self.entries)})"


class RenameHistory(BaseModel):
    """Applied operations, most recent last."""

    MAX_HISTORY: ClassVar[int] = 50

    operations: list[RenameOperation] = Field(default_factory=list)

    def push(self, operation: RenameOperation) -> None:
        """Append an operation, evicting the oldest ones beyond MAX_HISTORY."""
        self.operations.append(operation)
        overflow = len(self.operations) - self.MAX_HISTORY
        if overflow > 0:
            del self.operations[:overflow]

    def pop(self) -> RenameOperation | None:
        """Remove and return the most recent operation."""
        if not self.operations:
            return None
        return self.operations.pop()

    def peek(self) -> RenameOperation | None:
        """Return the most recent operation without removing it."""
        if not self.operations:
            return None
        return self.operations[-1]

    def is_empty(self) -> bool:
        return not self.operations

    def __len__(self) -> int:
        return len(self.operations)
