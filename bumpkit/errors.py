"""Exception types and exit codes used across bumpkit.

Each error carries the process exit code the CLI maps it to, so that the
pipeline can raise and the command line layer only has to report.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    FATAL_ERROR = 1
    INVALID_ARGUMENT = 9


class BumpkitError(Exception):
    """Base class for all bumpkit specific errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR


class InvalidVersionError(BumpkitError, ValueError):
    """Raised when a string is not a valid semantic version."""

    exit_code = ExitCode.INVALID_ARGUMENT


class InvalidArgumentError(BumpkitError):
    """Raised when a command-line argument or option value is invalid."""

    exit_code = ExitCode.INVALID_ARGUMENT


class ConfigurationError(BumpkitError):
    """Raised when options or a config file contradict each other."""

    exit_code = ExitCode.INVALID_ARGUMENT


class VersionNotFoundError(BumpkitError):
    """Raised when no current version could be determined and none was given."""


class OperationStateError(BumpkitError):
    """Raised when an operation update would break a state invariant."""


class GitError(BumpkitError):
    """Raised when a git command fails."""


class ScriptError(BumpkitError):
    """Raised when an execute hook or install command fails."""


class UserAbort(BumpkitError):
    """Raised when the user cancels an interactive step."""
