"""Shell and console utilities.

Provides thin wrappers around subprocess calls for git and arbitrary shell
commands, plus the output helpers used to report pipeline progress.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import click

from .errors import GitError, ScriptError

LOG = logging.getLogger(__name__)

_quiet = False


def set_quiet(quiet: bool) -> None:
    """Silence step/info/warn output (errors are always printed)."""
    global _quiet
    _quiet = quiet


def git(*args: str, cwd: str | Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--short").
        cwd: Working directory for the command.
        check: If True (default), raise GitError on non-zero exit. Set to
               False for commands that may legitimately fail (e.g., tag lookup),
               in which case an empty string is returned on failure.

    Returns:
        Stripped stdout from the git command.
    """
    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except OSError as exc:
        raise GitError(f"failed to execute git: {exc}") from exc

    if result.returncode != 0:
        LOG.debug("git exited with %s: %s", result.returncode, result.stderr.strip())
        if check:
            detail = result.stderr.strip() or result.stdout.strip()
            raise GitError(f"git {' '.join(args)} failed: {detail}")
        return ""
    return result.stdout.strip()


def run(command: str, cwd: str | Path | None = None) -> None:
    """Run a shell command, streaming its output to the terminal.

    Raises:
        ScriptError: If the command exits with a non-zero status.
    """
    LOG.debug("Running command: %s", command)
    result = subprocess.run(command, shell=True, cwd=cwd)
    if result.returncode != 0:
        raise ScriptError(f"Command failed with exit code {result.returncode}: {command}")


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    if not _quiet:
        click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    """Print an indented progress line."""
    if not _quiet:
        click.echo(f"  {msg}")


def warn(msg: str) -> None:
    """Print a warning line."""
    if not _quiet:
        click.echo(click.style(msg, fg="yellow"))


def error(msg: str) -> None:
    """Print an error message to stderr."""
    click.echo(click.style(f"ERROR: {msg}", fg="red"), err=True)
