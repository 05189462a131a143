"""Pure filename transformations, one per rename mode.

Nothing in this module touches the filesystem. Every transformation except the
regex one is total: any input string produces an output string.
"""

import math
import re
from collections.abc import Callable

from rnm.errors import PatternError
from rnm.models.rename import DatePosition, ModeParameters, PrefixAction, RenameMode


SECONDS_PER_DAY = 86400

# Used by DateInsert when a file has no modification time
MISSING_DATE = "00000000"

TITLE_SEPARATORS = frozenset("_-")

# $$, ${name}, $name (name is digits, letters and underscores)
_GROUP_REFERENCE = re.compile(r"\$(?:(\$)|\{(\w+)\}|([0-9A-Za-z_]+))")

_HASH_RUN = re.compile(r"#+")


def split_extension(filename: str) -> tuple[str, str]:
    """Split a filename into stem and extension at the last dot.

    The extension keeps its leading dot. A name without a dot has an empty extension.
    """
    dot = filename.rfind(".")
    if dot == -1:
        return filename, ""
    return filename[:dot], filename[dot:]


def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a regex mode search pattern. Returns None for an empty pattern.

    Raises:
        PatternError: If the pattern is not a valid regular expression.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(pattern, str(e)) from e


def expand_replacement(template: str, match: re.Match[str]) -> str:
    """Expand `$1`, `${1}`, `$name` and `${name}` group references in a replacement.

    `$$` is a literal dollar sign. Unknown groups and groups that did not take part
    in the match expand to an empty string. Backslashes have no special meaning.
    """

    def _expand(reference: re.Match[str]) -> str:
        if reference.group(1):
            return "$"
        name = reference.group(2) or reference.group(3)
        key: int | str = int(name) if name.isdigit() else name
        try:
            value = match.group(key)
        except IndexError:
            return ""
        return value or ""

    return _GROUP_REFERENCE.sub(_expand, template)


def regex_replace(filename: str, regex: re.Pattern[str] | None, replacement: str) -> str:
    if regex is None:
        return filename
    return regex.sub(lambda m: expand_replacement(replacement, m), filename)


def search_replace(filename: str, search: str, replacement: str) -> str:
    if not search:
        return filename
    return filename.replace(search, replacement)


def apply_numbering(filename: str, pattern: str, counter: int) -> str:
    """Render a numbering pattern such as `photo_###` and keep the original extension.

    Each run of `#` becomes the counter zero-padded to the run length. Counters wider
    than the run are not truncated.
    """
    if not pattern:
        return filename
    _, extension = split_extension(filename)
    stem = _HASH_RUN.sub(lambda m: str(counter).zfill(len(m.group())), pattern)
    return stem + extension


def apply_prefix(filename: str, prefix: str, action: PrefixAction) -> str:
    if not prefix:
        return filename
    if action is PrefixAction.ADD:
        return prefix + filename
    if filename.startswith(prefix):
        return filename[len(prefix) :]
    return filename


def apply_suffix(filename: str, suffix: str, action: PrefixAction) -> str:
    """Add or remove text at the end of the stem, before the extension."""
    if not suffix:
        return filename
    stem, extension = split_extension(filename)
    if action is PrefixAction.ADD:
        return stem + suffix + extension
    if stem.endswith(suffix):
        return stem[: len(stem) - len(suffix)] + extension
    return filename


def civil_from_days(days: int) -> tuple[int, int, int]:
    """Convert days since 1970-01-01 to a (year, month, day) proleptic Gregorian date.

    Works in 400-year eras of 146097 days, so leap years follow the Gregorian rule:
    divisible by 4 and not by 100, unless also divisible by 400.
    """
    z = days + 719468
    era = z // 146097
    day_of_era = z - era * 146097
    year_of_era = (day_of_era - day_of_era // 1460 + day_of_era // 36524 - day_of_era // 146096) // 365
    day_of_year = day_of_era - (365 * year_of_era + year_of_era // 4 - year_of_era // 100)
    shifted_month = (5 * day_of_year + 2) // 153  # March is 0
    day = day_of_year - (153 * shifted_month + 2) // 5 + 1
    month = shifted_month + 3 if shifted_month < 10 else shifted_month - 9
    year = year_of_era + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


def format_date(timestamp: float | None) -> str:
    """Format a Unix timestamp as a UTC `YYYYMMDD` string."""
    if timestamp is None or not math.isfinite(timestamp):
        return MISSING_DATE
    year, month, day = civil_from_days(math.floor(timestamp / SECONDS_PER_DAY))
    return f"{year:04d}{month:02d}{day:02d}"


def apply_date_insert(filename: str, position: DatePosition, modified_time: float | None) -> str:
    date = format_date(modified_time)
    stem, extension = split_extension(filename)
    if position is DatePosition.PREFIX:
        return f"{date}_{stem}{extension}"
    if position is DatePosition.SUFFIX:
        return f"{stem}_{date}{extension}"
    return date + extension


def to_title_case(text: str) -> str:
    """Capitalize the first character after the start, whitespace, `_` or `-`; lower the rest."""
    result = []
    capitalize_next = True
    for char in text:
        if char.isspace() or char in TITLE_SEPARATORS:
            result.append(char)
            capitalize_next = True
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char.lower())
    return "".join(result)


def to_uppercase(filename: str) -> str:
    stem, extension = split_extension(filename)
    return stem.upper() + extension.lower()


def to_lowercase(filename: str) -> str:
    return filename.lower()


def to_titlecase(filename: str) -> str:
    stem, extension = split_extension(filename)
    return to_title_case(stem) + extension.lower()


# (filename, params, counter, modified_time, regex) -> new filename
_Transformer = Callable[[str, ModeParameters, int, float | None, re.Pattern[str] | None], str]

_TRANSFORMERS: dict[RenameMode, _Transformer] = {
    RenameMode.SEARCH_REPLACE: lambda name, p, counter, mtime, regex: search_replace(name, p.search, p.replace),
    RenameMode.REGEX: lambda name, p, counter, mtime, regex: regex_replace(name, regex, p.replace),
    RenameMode.NUMBERING: lambda name, p, counter, mtime, regex: apply_numbering(name, p.search, counter),
    RenameMode.PREFIX: lambda name, p, counter, mtime, regex: apply_prefix(name, p.search, p.prefix_action),
    RenameMode.SUFFIX: lambda name, p, counter, mtime, regex: apply_suffix(name, p.search, p.prefix_action),
    RenameMode.DATE_INSERT: lambda name, p, counter, mtime, regex: apply_date_insert(name, p.date_position, mtime),
    RenameMode.UPPERCASE: lambda name, p, counter, mtime, regex: to_uppercase(name),
    RenameMode.LOWERCASE: lambda name, p, counter, mtime, regex: to_lowercase(name),
    RenameMode.TITLE_CASE: lambda name, p, counter, mtime, regex: to_titlecase(name),
}


def transform(
    filename: str,
    mode: RenameMode,
    params: ModeParameters,
    counter: int = 0,
    modified_time: float | None = None,
    regex: re.Pattern[str] | None = None,
) -> str:
    """Compute the new name for `filename` under `mode`.

    Args:
        filename: Original filename, without directory components.
        mode: Rename mode to apply.
        params: Mode parameters. Only the fields the mode uses are read.
        counter: Current counter value, used by numbering mode.
        modified_time: Last modification time of the file, used by date mode.
        regex: Precompiled regex mode pattern. Compiled from `params.search` when omitted.

    Raises:
        PatternError: In regex mode, if `params.search` is not a valid regular expression.
    """
    if mode is RenameMode.REGEX and regex is None:
        regex = compile_pattern(params.search)
    return _TRANSFORMERS[mode](filename, params, counter, modified_time, regex)
