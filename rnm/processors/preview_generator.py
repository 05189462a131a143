"""Rename preview generation."""

import logging
from collections.abc import Iterable

from rnm.models.rename import FileEntry, ModeParameters, RenameMode, RenamePreview
from rnm.transform import compile_pattern, transform


logger = logging.getLogger(__name__)


def _processing_order(files: list[FileEntry], selected: Iterable[int]) -> list[int]:
    """Indices to preview, ascending. An empty selection means every file."""
    indices = sorted(set(selected))
    if not indices:
        return list(range(len(files)))
    return [index for index in indices if 0 <= index < len(files)]


def generate_previews(
    files: list[FileEntry],
    selected: Iterable[int],
    mode: RenameMode,
    params: ModeParameters,
) -> list[RenamePreview]:
    """Compute the proposed new name of every considered file.

    Files are processed in ascending index order, which is the order the numbering
    counter advances in. Directories are skipped. The returned previews are sorted by
    original name for display; that sort happens after numbering.

    Args:
        files: Directory listing the indices refer to.
        selected: Indices of selected files. Empty means all files.
        mode: Rename mode to apply.
        params: Mode parameters.

    Returns:
        One RenamePreview per considered file, sorted by original name.

    Raises:
        PatternError: In regex mode, if the search pattern does not compile.
    """
    regex = compile_pattern(params.search) if mode is RenameMode.REGEX else None

    previews: list[RenamePreview] = []
    counter = params.number_start

    for index in _processing_order(files, selected):
        entry = files[index]
        if entry.is_directory:
            continue

        new_name = transform(entry.name, mode, params, counter=counter, modified_time=entry.modified_time, regex=regex)
        previews.append(RenamePreview(original_name=entry.name, new_name=new_name, source_index=index))
        counter += params.number_step

    previews.sort(key=lambda p: p.original_name)

    logger.debug(
        "Generated %d previews in %s mode, %d changing",
        len(previews),
        mode.value,
        sum(1 for p in previews if p.will_change),
    )
    return previews


def changed_previews(previews: list[RenamePreview]) -> list[RenamePreview]:
    """The previews that actually rename something."""
    return [preview for preview in previews if preview.will_change]
