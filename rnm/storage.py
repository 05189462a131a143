"""Persistence of rename history and user configuration.

Both stores keep a single JSON document at a per-user location. A store created
without a path is disabled: loads return defaults and saves do nothing.
"""

import logging
import os
from pathlib import Path

import click
import pydantic

from rnm.errors import HistoryError
from rnm.models.config import Config
from rnm.models.history import RenameHistory, RenameOperation


logger = logging.getLogger(__name__)

APP_NAME = "rnm"
HISTORY_FILENAME = "history.json"
CONFIG_FILENAME = "config.json"

# Environment overrides for the storage directories
DATA_DIR_ENV = "RNM_DATA_DIR"
CONFIG_DIR_ENV = "RNM_CONFIG_DIR"


def _user_app_dir(env_var: str) -> Path | None:
    """Resolve a per-user application directory, or None if there is no usable home."""
    override = os.environ.get(env_var)
    if override:
        return Path(override)
    if os.path.expanduser("~") == "~":
        return None
    return Path(click.get_app_dir(APP_NAME))


def default_history_path() -> Path | None:
    directory = _user_app_dir(DATA_DIR_ENV)
    return directory / HISTORY_FILENAME if directory else None


def default_config_path() -> Path | None:
    directory = _user_app_dir(CONFIG_DIR_ENV)
    return directory / CONFIG_FILENAME if directory else None


def _read_document(path: Path, what: str) -> str | None:
    if not path.exists():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise HistoryError(f"Could not read {what}: {path}: {e}") from e


def _write_document(path: Path, content: str, what: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except (OSError, UnicodeEncodeError) as e:
        raise HistoryError(f"Could not write {what}: {path}: {e}") from e


class HistoryStore:
    """Bounded history of applied rename operations.

    Every method loads a fresh copy from disk. Two processes writing at the same
    time can lose one another's changes; the last write wins.
    """

    def __init__(self, path: Path | None) -> None:
        """Initialize the store.

        Args:
            path: Location of the history file. None disables history.
        """
        self.path = path

    @classmethod
    def from_default_location(cls) -> "HistoryStore":
        return cls(default_history_path())

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def load(self) -> RenameHistory:
        """Load the history. A missing file or a disabled store gives an empty history.

        Raises:
            HistoryError: If the file cannot be read or is not a valid history document.
        """
        if self.path is None:
            return RenameHistory()
        content = _read_document(self.path, "history")
        if content is None:
            return RenameHistory()
        try:
            return RenameHistory.model_validate_json(content)
        except pydantic.ValidationError as e:
            raise HistoryError(f"Invalid history file: {self.path}") from e

    def save(self, history: RenameHistory) -> None:
        """Write the history, creating the parent directory if needed.

        Raises:
            HistoryError: If the file cannot be written.
        """
        if self.path is None:
            return
        _write_document(self.path, history.model_dump_json(indent=2), "history")
        logger.debug("Saved %d history operations to %s", len(history), self.path)

    def push(self, operation: RenameOperation) -> None:
        history = self.load()
        history.push(operation)
        self.save(history)

    def pop(self) -> RenameOperation | None:
        """Remove the most recent operation from the stored history and return it."""
        history = self.load()
        operation = history.pop()
        if operation is not None:
            self.save(history)
        return operation

    def peek(self) -> RenameOperation | None:
        return self.load().peek()


class ConfigStore:
    """User configuration: defaults and presets."""

    def __init__(self, path: Path | None) -> None:
        self.path = path

    @classmethod
    def from_default_location(cls) -> "ConfigStore":
        return cls(default_config_path())

    def load(self) -> Config:
        """Load the configuration, or defaults if there is none.

        Raises:
            HistoryError: If the file cannot be read or is not a valid config document.
        """
        if self.path is None:
            return Config()
        content = _read_document(self.path, "configuration")
        if content is None:
            return Config()
        try:
            return Config.model_validate_json(content)
        except pydantic.ValidationError as e:
            raise HistoryError(f"Invalid configuration file: {self.path}") from e

    def save(self, config: Config) -> None:
        if self.path is None:
            return
        _write_document(self.path, config.model_dump_json(indent=2), "configuration")
