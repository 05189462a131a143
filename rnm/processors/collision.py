"""Strategies deciding whether an existing destination blocks a rename."""

import os
from abc import ABC, abstractmethod
from pathlib import Path


class CollisionStrategy(ABC):
    """Base class for destination collision checks.

    A rename whose destination already exists is normally refused. Strategies decide
    when the existing destination is really the source itself, as happens with a
    case-only rename on a case-insensitive filesystem.
    """

    @abstractmethod
    def is_collision(self, source: Path, destination: Path) -> bool:
        """Determine if renaming `source` to `destination` would replace another entry.

        Args:
            source: Existing path being renamed.
            destination: Proposed new path.

        Returns:
            True if the destination exists and is a different entry, False otherwise.
        """
        pass


class FilesystemCollisionStrategy(CollisionStrategy):
    """Ask the filesystem whether source and destination are the same entry.

    On a case-insensitive filesystem `Test.txt` and `test.txt` resolve to the same
    file, so a case-only rename is allowed. On a case-sensitive filesystem two files
    differing only by case are distinct and the rename is refused.
    """

    def is_collision(self, source: Path, destination: Path) -> bool:
        if not destination.exists():
            return False
        if source == destination:
            return False
        try:
            return not os.path.samefile(source, destination)
        except OSError:
            return True


class CaseInsensitiveCollisionStrategy(CollisionStrategy):
    """Allow any rename whose paths differ only by letter case.

    This never consults the filesystem about identity, so on a case-sensitive
    filesystem it can let a rename replace a distinct file whose name differs only
    by case.
    """

    def is_collision(self, source: Path, destination: Path) -> bool:
        if not destination.exists():
            return False
        if source == destination:
            return False
        return str(source).lower() != str(destination).lower()


DEFAULT_COLLISION_STRATEGY = FilesystemCollisionStrategy()
