"""Tests for bumpkit.operation."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from bumpkit.errors import OperationStateError
from bumpkit.models import PromptRelease
from bumpkit.operation import Operation, OperationState, ProgressEvent, apply_patch

from conftest import start


class TestApplyPatch:
    def test_returns_new_snapshot(self) -> None:
        state = OperationState()
        new = apply_patch(state, {"current_version": "1.0.0"})
        assert new.current_version == "1.0.0"
        assert state.current_version == ""

    def test_rejects_invalid_version(self) -> None:
        with pytest.raises(OperationStateError):
            apply_patch(OperationState(), {"current_version": "one"})

    def test_new_version_requires_current_version(self) -> None:
        with pytest.raises(OperationStateError):
            apply_patch(OperationState(), {"new_version": "2.0.0"})

    def test_new_version_with_current_in_same_patch(self) -> None:
        state = apply_patch(OperationState(), {"current_version": "1.0.0", "new_version": "2.0.0"})
        assert state.new_version == "2.0.0"

    def test_versions_can_not_be_cleared(self) -> None:
        state = apply_patch(OperationState(), {"current_version": "1.0.0"})
        with pytest.raises(OperationStateError):
            apply_patch(state, {"current_version": ""})

    def test_files_are_appended(self) -> None:
        state = apply_patch(OperationState(), {}, updated_files=["a"], skipped_files=["x"])
        state = apply_patch(state, {}, updated_files=["b"], skipped_files=["y"])
        assert state.updated_files == ("a", "b")
        assert state.skipped_files == ("x", "y")

    def test_duplicate_updated_file(self) -> None:
        state = apply_patch(OperationState(), {}, updated_files=["a"])
        with pytest.raises(OperationStateError):
            apply_patch(state, {}, updated_files=["a"])

    def test_file_lists_can_not_be_patched(self) -> None:
        with pytest.raises(OperationStateError):
            apply_patch(OperationState(), {"updated_files": ("a",)})

    def test_unknown_field(self) -> None:
        with pytest.raises(OperationStateError):
            apply_patch(OperationState(), {"colour": "blue"})

    def test_state_is_frozen(self) -> None:
        with pytest.raises(Exception):
            OperationState().new_version = "1.0.0"  # type: ignore[misc]


class TestOperation:
    def test_start_normalizes_options(self, tmp_path: Path) -> None:
        operation = start(tmp_path)
        assert isinstance(operation.options.release, PromptRelease)
        assert operation.state.current_version == ""

    def test_start_with_current_version(self, tmp_path: Path) -> None:
        operation = start(tmp_path, current_version="1.2.3", release="patch")
        assert operation.state.current_version == "1.2.3"
        assert operation.state.current_version_source == "user"

    def test_update_returns_self(self, tmp_path: Path) -> None:
        operation = start(tmp_path, release="patch")
        assert operation.update(current_version="1.0.0") is operation

    def test_progress_callback_receives_events(self, tmp_path: Path) -> None:
        progress = MagicMock()
        operation = Operation.start({"cwd": str(tmp_path), "release": "patch"}, progress)

        operation.update(current_version="1.0.0")
        progress.assert_not_called()

        operation.update(event=ProgressEvent.FILE_UPDATED, updated_files=["package.json"], detail="package.json")
        progress.assert_called_once_with(ProgressEvent.FILE_UPDATED, operation, "package.json")
        assert operation.state.event == ProgressEvent.FILE_UPDATED

    def test_failed_update_keeps_state(self, tmp_path: Path) -> None:
        operation = start(tmp_path, release="patch", current_version="1.0.0")
        with pytest.raises(OperationStateError):
            operation.update(new_version="bad")
        assert operation.state.new_version == ""

    def test_reset_cache(self, tmp_path: Path) -> None:
        cargo = tmp_path / "Cargo.toml"
        cargo.write_text('[package]\nversion = "1.0.0"\n')
        operation = start(tmp_path, release="patch")
        operation.cache.load(cargo)
        assert len(operation.cache) == 1

        operation.reset_cache()

        assert len(operation.cache) == 0
