"""Rename data models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class RenameMode(str, Enum):
    """How new filenames are derived from the original ones."""

    SEARCH_REPLACE = "search_replace"
    REGEX = "regex"
    NUMBERING = "numbering"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    DATE_INSERT = "date_insert"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    TITLE_CASE = "title_case"

    @property
    def display_name(self) -> str:
        return _MODE_DISPLAY_NAMES[self]

    @property
    def uses_search_replace(self) -> bool:
        """Whether both the search and the replace fields are meaningful for this mode."""
        return self in (RenameMode.SEARCH_REPLACE, RenameMode.REGEX)


_MODE_DISPLAY_NAMES = {
    RenameMode.SEARCH_REPLACE: "Search & Replace",
    RenameMode.REGEX: "Regex",
    RenameMode.NUMBERING: "Numbering",
    RenameMode.PREFIX: "Prefix",
    RenameMode.SUFFIX: "Suffix",
    RenameMode.DATE_INSERT: "Date",
    RenameMode.UPPERCASE: "UPPERCASE",
    RenameMode.LOWERCASE: "lowercase",
    RenameMode.TITLE_CASE: "Title Case",
}


class PrefixAction(str, Enum):
    """Whether the Prefix/Suffix modes add or remove their text."""

    ADD = "add"
    REMOVE = "remove"

    @property
    def display_name(self) -> str:
        return "Add" if self is PrefixAction.ADD else "Remove"


class DatePosition(str, Enum):
    """Where the DateInsert mode puts the date."""

    PREFIX = "prefix"
    SUFFIX = "suffix"
    REPLACE = "replace"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class SortOrder(str, Enum):
    """Listing order of scanned files."""

    NAME = "name"
    EXTENSION = "extension"
    SIZE = "size"
    MODIFIED = "modified"


class FileEntry(BaseModel):
    """Snapshot of a filesystem entry taken at enumeration time."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="Full path of the entry")
    name: str = Field(description="Filename including extension")
    is_directory: bool = Field(default=False, description="Whether the entry is a directory")
    size: int = Field(default=0, description="Size in bytes")
    modified_time: float | None = Field(default=None, description="Last modification time, seconds since the epoch")

    @classmethod
    def from_path(cls, path: Path) -> "FileEntry":
        """Create a FileEntry from an existing path."""
        stat = path.stat()
        return cls(
            path=path,
            name=path.name,
            is_directory=path.is_dir(),
            size=stat.st_size,
            modified_time=stat.st_mtime,
        )

    @property
    def extension(self) -> str:
        """Extension without the leading dot, empty if there is none."""
        dot = self.name.rfind(".")
        return self.name[dot + 1 :] if dot != -1 else ""


class ModeParameters(BaseModel):
    """Parameters for a rename mode. Fields a mode does not use are ignored."""

    search: str = Field(default="", description="Search text, regex, numbering pattern, or prefix/suffix text")
    replace: str = Field(default="", description="Replacement text for search & replace and regex modes")
    prefix_action: PrefixAction = Field(default=PrefixAction.ADD)
    number_start: int = Field(default=1, ge=0, description="First counter value for numbering mode")
    number_step: int = Field(default=1, ge=0, description="Counter increment for numbering mode")
    date_position: DatePosition = Field(default=DatePosition.PREFIX)


class RenamePreview(BaseModel):
    """Proposed rename for a single file."""

    model_config = ConfigDict(frozen=True)

    original_name: str
    new_name: str
    source_index: int = Field(description="Index of the file in the list the preview was generated from")

    @property
    def will_change(self) -> bool:
        return self.new_name != self.original_name

    def __str__(self) -> str:
        return f"RenamePreview('{self.original_name}' -> '{self.new_name}')"
