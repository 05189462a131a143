"""Shared fixtures."""

from pathlib import Path

import pytest

from rnm.models.rename import FileEntry
from rnm.storage import ConfigStore, HistoryStore


@pytest.fixture
def make_entry():
    """Factory for FileEntry snapshots that need not exist on disk."""

    def _make(name: str, is_directory: bool = False, modified_time: float | None = None) -> FileEntry:
        return FileEntry(path=Path(name), name=name, is_directory=is_directory, modified_time=modified_time)

    return _make


@pytest.fixture
def history_store(tmp_path: Path) -> HistoryStore:
    return HistoryStore(tmp_path / "data" / "history.json")


@pytest.fixture
def config_store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "config" / "config.json")


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Empty directory to rename files in."""
    directory = tmp_path / "work"
    directory.mkdir()
    return directory
