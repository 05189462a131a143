"""Tests for batch validation and execution."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from rnm.errors import ExecutionError, HistoryError, ValidationError
from rnm.models.rename import RenamePreview
from rnm.processors.collision import CaseInsensitiveCollisionStrategy
from rnm.processors.executor import RenameBatch, ValidatedBatch, execute_renames
from rnm.storage import HistoryStore


def _preview(original: str, new: str, index: int = 0) -> RenamePreview:
    return RenamePreview(original_name=original, new_name=new, source_index=index)


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_text(name)


class TestValidation:
    """Tests for the validation phase."""

    def test_valid_batch(self, work_dir):
        """Test that a clean batch validates."""
        _touch(work_dir, "a.txt")

        validated = RenameBatch([_preview("a.txt", "b.txt")], work_dir).validate()

        assert isinstance(validated, ValidatedBatch)

    def test_missing_source(self, work_dir):
        """Test that a missing source is reported."""
        with pytest.raises(ValidationError, match="Source file does not exist: ghost.txt"):
            RenameBatch([_preview("ghost.txt", "b.txt")], work_dir).validate()

    def test_existing_destination(self, work_dir):
        """Test that an existing unrelated destination is reported."""
        _touch(work_dir, "a.txt", "b.txt")

        with pytest.raises(ValidationError, match="Target file already exists: b.txt"):
            RenameBatch([_preview("a.txt", "b.txt")], work_dir).validate()

    def test_case_only_rename_is_not_a_collision(self, work_dir):
        """Test renaming Test.txt to test.txt is allowed."""
        _touch(work_dir, "Test.txt")

        RenameBatch([_preview("Test.txt", "test.txt")], work_dir).validate()

    def test_path_separators_rejected(self, work_dir):
        """Test that names with path separators are rejected."""
        _touch(work_dir, "a.txt", "b.txt")

        problems = RenameBatch([_preview("a.txt", "sub/a.txt"), _preview("b.txt", "sub\\b.txt", 1)], work_dir).check()

        assert problems == [
            "Invalid filename, contains a path separator: sub/a.txt",
            "Invalid filename, contains a path separator: sub\\b.txt",
        ]

    def test_nul_character_rejected(self, work_dir):
        """Test that a NUL in a new name fails validation before anything is renamed."""
        _touch(work_dir, "a.txt", "c.txt")
        previews = [_preview("a.txt", "aa.txt"), _preview("c.txt", "c\x00.txt", 1)]

        with pytest.raises(ValidationError, match="contains a NUL character"):
            execute_renames(previews, work_dir)

        assert sorted(p.name for p in work_dir.iterdir()) == ["a.txt", "c.txt"]

    def test_empty_name_rejected(self, work_dir):
        """Test that an empty new name is rejected."""
        _touch(work_dir, "a.txt")

        with pytest.raises(ValidationError, match="Empty filename"):
            RenameBatch([_preview("a.txt", "")], work_dir).validate()

    def test_duplicate_destinations_rejected(self, work_dir):
        """Test that two files cannot be renamed to the same name."""
        _touch(work_dir, "a.txt", "b.txt")

        with pytest.raises(ValidationError, match="would be renamed to 'c.txt'"):
            RenameBatch([_preview("a.txt", "c.txt"), _preview("b.txt", "c.txt", 1)], work_dir).validate()

    def test_all_problems_reported(self, work_dir):
        """Test that every problem is collected and nothing is renamed."""
        _touch(work_dir, "good.txt")
        previews = [
            _preview("good.txt", "fine.txt"),
            _preview("missing.txt", "other.txt", 1),
            _preview("good.txt", "bad/name.txt", 2),
        ]

        with pytest.raises(ValidationError) as excinfo:
            execute_renames(previews, work_dir)

        assert len(excinfo.value.problems) == 2
        assert "Source file does not exist: missing.txt" in excinfo.value.problems
        assert (work_dir / "good.txt").exists()
        assert not (work_dir / "fine.txt").exists()

    def test_unchanged_previews_ignored(self, work_dir):
        """Test that previews that change nothing are not validated."""
        RenameBatch([_preview("ghost.txt", "ghost.txt")], work_dir).validate()

    def test_validated_batch_cannot_be_built_directly(self, work_dir):
        """Test that validation cannot be skipped."""
        with pytest.raises(TypeError):
            ValidatedBatch(RenameBatch([], work_dir))


class TestExecution:
    """Tests for the execution phase."""

    def test_renames_files(self, work_dir):
        """Test that files are renamed and counted."""
        _touch(work_dir, "a.txt", "b.txt", "c.txt")
        previews = [_preview("a.txt", "x.txt"), _preview("b.txt", "y.txt", 1), _preview("c.txt", "c.txt", 2)]

        count = execute_renames(previews, work_dir)

        assert count == 2
        assert sorted(p.name for p in work_dir.iterdir()) == ["c.txt", "x.txt", "y.txt"]

    def test_case_only_rename(self, work_dir):
        """Test that a case-only rename is applied."""
        _touch(work_dir, "Test.txt")

        count = execute_renames([_preview("Test.txt", "test.txt")], work_dir)

        assert count == 1
        assert [p.name for p in work_dir.iterdir()] == ["test.txt"]

    def test_result_summary(self, work_dir):
        """Test the executed batch summary."""
        _touch(work_dir, "a.txt")

        result = RenameBatch([_preview("a.txt", "b.txt")], work_dir).validate().execute()

        assert result.renamed_count == 1
        assert result.summary() == f"Renamed 1 file(s) in {work_dir}:\n  a.txt -> b.txt"

    def test_execute_once(self, work_dir):
        """Test that a validated batch runs only once."""
        _touch(work_dir, "a.txt")
        validated = RenameBatch([_preview("a.txt", "b.txt")], work_dir).validate()
        validated.execute()

        with pytest.raises(RuntimeError):
            validated.execute()

    def test_failure_stops_and_keeps_earlier_renames(self, work_dir):
        """Test partial failure semantics."""
        _touch(work_dir, "a.txt", "b.txt", "c.txt")
        previews = [_preview("a.txt", "a2.txt"), _preview("b.txt", "b2.txt", 1), _preview("c.txt", "c2.txt", 2)]
        real_rename = os.rename

        def failing_rename(src, dst):
            if Path(src).name == "b.txt":
                raise PermissionError("denied")
            real_rename(src, dst)

        with patch("rnm.processors.executor.os.rename", side_effect=failing_rename):
            with pytest.raises(ExecutionError) as excinfo:
                execute_renames(previews, work_dir)

        assert excinfo.value.original_name == "b.txt"
        assert excinfo.value.new_name == "b2.txt"
        assert [e.new_name for e in excinfo.value.completed] == ["a2.txt"]
        assert "'b.txt' to 'b2.txt'" in str(excinfo.value)
        assert sorted(p.name for p in work_dir.iterdir()) == ["a2.txt", "b.txt", "c.txt"]

    def test_value_error_becomes_execution_error(self, work_dir):
        """Test that a rename rejected with ValueError keeps the completed renames."""
        _touch(work_dir, "a.txt", "c.txt")
        previews = [_preview("a.txt", "aa.txt"), _preview("c.txt", "cc.txt", 1)]
        validated = RenameBatch(previews, work_dir).validate()
        real_rename = os.rename

        def rejecting_rename(src, dst):
            if Path(src).name == "c.txt":
                raise ValueError("embedded null byte")
            real_rename(src, dst)

        with patch("rnm.processors.executor.os.rename", side_effect=rejecting_rename):
            with pytest.raises(ExecutionError) as excinfo:
                validated.execute()

        assert [e.new_name for e in excinfo.value.completed] == ["aa.txt"]
        assert isinstance(excinfo.value.cause, ValueError)

    def test_destination_appearing_after_validation(self, work_dir):
        """Test that a file created after validation is not overwritten."""
        _touch(work_dir, "a.txt")
        validated = RenameBatch([_preview("a.txt", "b.txt")], work_dir).validate()
        _touch(work_dir, "b.txt")

        with pytest.raises(ExecutionError):
            validated.execute()

        assert (work_dir / "b.txt").read_text() == "b.txt"


class TestHistoryRecording:
    """Tests for the history side effect."""

    def test_records_applied_renames(self, work_dir, history_store):
        """Test that only the renamed subset is recorded."""
        _touch(work_dir, "a.txt", "b.txt")
        previews = [_preview("a.txt", "z.txt"), _preview("b.txt", "b.txt", 1)]

        execute_renames(previews, work_dir, history_store, description="Search & Replace: 'a' -> 'z'")

        operation = history_store.peek()
        assert operation.directory == work_dir
        assert operation.description == "Search & Replace: 'a' -> 'z'"
        assert [(e.original_name, e.new_name) for e in operation.entries] == [("a.txt", "z.txt")]

    def test_nothing_recorded_without_changes(self, work_dir, history_store):
        """Test that an empty batch leaves no history."""
        _touch(work_dir, "a.txt")

        count = execute_renames([_preview("a.txt", "a.txt")], work_dir, history_store)

        assert count == 0
        assert history_store.load().is_empty()

    def test_history_failure_is_swallowed(self, work_dir):
        """Test that a broken history store does not fail the rename."""
        _touch(work_dir, "a.txt")
        store = HistoryStore(work_dir / "history.json")

        with patch.object(HistoryStore, "push", side_effect=HistoryError("disk full")):
            count = execute_renames([_preview("a.txt", "b.txt")], work_dir, store)

        assert count == 1
        assert (work_dir / "b.txt").exists()

    def test_undecodable_history_is_swallowed(self, work_dir, tmp_path):
        """Test that a history file that is not UTF-8 does not fail the rename."""
        _touch(work_dir, "a.txt")
        history_path = tmp_path / "history.json"
        history_path.write_bytes(b"\xff\xfe\x00garbage")

        count = execute_renames([_preview("a.txt", "b.txt")], work_dir, HistoryStore(history_path))

        assert count == 1
        assert (work_dir / "b.txt").exists()
        assert history_path.read_bytes() == b"\xff\xfe\x00garbage"


class TestCaseInsensitiveStrategy:
    """Executor with the name-based collision check."""

    def test_case_variant_allowed(self, work_dir):
        """Test that the name-based check treats case variants as the same file."""
        _touch(work_dir, "Photo.JPG")

        count = execute_renames(
            [_preview("Photo.JPG", "photo.jpg")], work_dir, collision_strategy=CaseInsensitiveCollisionStrategy()
        )

        assert count == 1
        assert (work_dir / "photo.jpg").exists()
