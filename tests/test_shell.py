"""Tests for bumpkit.shell."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from bumpkit.errors import GitError, ScriptError
from bumpkit.shell import error, git, info, run, set_quiet, step


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestGit:
    @patch("bumpkit.shell.subprocess.run")
    def test_returns_stripped_stdout(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(stdout="v1.0.0\n")

        assert git("describe", "--tags", cwd="/repo") == "v1.0.0"
        mock_run.assert_called_once_with(
            ["git", "describe", "--tags"], cwd="/repo", capture_output=True, text=True
        )

    @patch("bumpkit.shell.subprocess.run")
    def test_failure_raises(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(returncode=128, stderr="fatal: not a git repository\n")

        with pytest.raises(GitError, match="not a git repository"):
            git("status")

    @patch("bumpkit.shell.subprocess.run")
    def test_unchecked_failure_returns_empty(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(returncode=128, stderr="fatal: No names found")
        assert git("describe", check=False) == ""

    @patch("bumpkit.shell.subprocess.run")
    def test_git_missing(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError("git")
        with pytest.raises(GitError):
            git("status")


class TestRun:
    @patch("bumpkit.shell.subprocess.run")
    def test_success(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed()
        run("npm install", cwd="/repo")
        mock_run.assert_called_once_with("npm install", shell=True, cwd="/repo")

    @patch("bumpkit.shell.subprocess.run")
    def test_failure(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(returncode=2)
        with pytest.raises(ScriptError, match="exit code 2"):
            run("make dist")


class TestOutput:
    def test_quiet_silences_progress(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_quiet(True)
        try:
            step("Bumping")
            info("Updated package.json")
            error("boom")
        finally:
            set_quiet(False)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ERROR: boom" in captured.err

    def test_step_header(self, capsys: pytest.CaptureFixture[str]) -> None:
        step("Bumping 1.0.0 → 1.1.0")
        assert "Bumping 1.0.0 → 1.1.0" in capsys.readouterr().out
