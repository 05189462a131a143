"""User configuration and preset models."""

from pydantic import BaseModel, Field

from rnm.models.rename import DatePosition, RenameMode, SortOrder


class Preset(BaseModel):
    """A named shortcut for a rename mode and its search/replace values."""

    name: str
    mode: RenameMode
    search: str = ""
    replace: str = ""


class Config(BaseModel):
    """Persisted user configuration."""

    default_mode: RenameMode = Field(default=RenameMode.SEARCH_REPLACE)
    default_sort: SortOrder = Field(default=SortOrder.NAME)
    presets: dict[str, Preset] = Field(default_factory=dict)

    def add_preset(self, preset: Preset) -> None:
        """Add a preset, replacing any existing preset of the same name."""
        self.presets[preset.name] = preset

    def remove_preset(self, name: str) -> Preset | None:
        return self.presets.pop(name, None)

    def get_preset(self, name: str) -> Preset | None:
        return self.presets.get(name)

    def list_presets(self) -> list[str]:
        return sorted(self.presets)


MODE_TOKENS: dict[str, RenameMode] = {
    "search": RenameMode.SEARCH_REPLACE,
    "searchreplace": RenameMode.SEARCH_REPLACE,
    "search-replace": RenameMode.SEARCH_REPLACE,
    "s": RenameMode.SEARCH_REPLACE,
    "regex": RenameMode.REGEX,
    "r": RenameMode.REGEX,
    "numbering": RenameMode.NUMBERING,
    "number": RenameMode.NUMBERING,
    "num": RenameMode.NUMBERING,
    "n": RenameMode.NUMBERING,
    "prefix": RenameMode.PREFIX,
    "pre": RenameMode.PREFIX,
    "suffix": RenameMode.SUFFIX,
    "suf": RenameMode.SUFFIX,
    "date": RenameMode.DATE_INSERT,
    "dateinsert": RenameMode.DATE_INSERT,
    "date-insert": RenameMode.DATE_INSERT,
    "d": RenameMode.DATE_INSERT,
    "upper": RenameMode.UPPERCASE,
    "uppercase": RenameMode.UPPERCASE,
    "u": RenameMode.UPPERCASE,
    "lower": RenameMode.LOWERCASE,
    "lowercase": RenameMode.LOWERCASE,
    "l": RenameMode.LOWERCASE,
    "title": RenameMode.TITLE_CASE,
    "titlecase": RenameMode.TITLE_CASE,
    "t": RenameMode.TITLE_CASE,
}

DATE_POSITION_TOKENS: dict[str, DatePosition] = {
    "prefix": DatePosition.PREFIX,
    "pre": DatePosition.PREFIX,
    "p": DatePosition.PREFIX,
    "suffix": DatePosition.SUFFIX,
    "suf": DatePosition.SUFFIX,
    "s": DatePosition.SUFFIX,
    "replace": DatePosition.REPLACE,
    "rep": DatePosition.REPLACE,
    "r": DatePosition.REPLACE,
}

SORT_ORDER_TOKENS: dict[str, SortOrder] = {
    "name": SortOrder.NAME,
    "extension": SortOrder.EXTENSION,
    "ext": SortOrder.EXTENSION,
    "size": SortOrder.SIZE,
    "modified": SortOrder.MODIFIED,
    "mtime": SortOrder.MODIFIED,
    "date": SortOrder.MODIFIED,
}


def parse_mode(token: str) -> RenameMode | None:
    """Map a command line mode token to a RenameMode, case-insensitively."""
    return MODE_TOKENS.get(token.lower())


def parse_date_position(token: str) -> DatePosition | None:
    return DATE_POSITION_TOKENS.get(token.lower())


def parse_sort_order(token: str) -> SortOrder | None:
    return SORT_ORDER_TOKENS.get(token.lower())
