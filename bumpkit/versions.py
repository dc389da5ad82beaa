"""Version parsing and bumping utilities.

Wraps the semver library with the increment rules npm users expect:
bumping out of a prerelease finalizes it ("1.3.0-beta.2" → minor → "1.3.0"),
and the first prerelease under an identifier is ".1" rather than ".0".
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

import semver

from .commits import determine_semver_change
from .errors import InvalidArgumentError, InvalidVersionError

if TYPE_CHECKING:
    from .models import GitCommit

PRERELEASE_TYPES = ("premajor", "preminor", "prepatch", "prerelease")
RELEASE_TYPES = PRERELEASE_TYPES + ("major", "minor", "patch")
NEXT_TYPE = "next"
CONVENTIONAL_TYPE = "conventional"
BUMP_KINDS = RELEASE_TYPES + (NEXT_TYPE, CONVENTIONAL_TYPE)

_PREFIX_RE = re.compile(r"^[=v]+")


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Surrounding whitespace and a leading "v" or "=" are accepted
    ("v1.2.3" → "1.2.3", "=1.2.3" → "1.2.3"), anything else must be a
    complete semantic version.

    Raises:
        InvalidVersionError: If the string is not a valid version.
    """
    value = str(version_str).strip()
    if value[:1] in ("v", "="):
        value = value[1:]
    try:
        return semver.Version.parse(value)
    except (ValueError, TypeError) as exc:
        raise InvalidVersionError(f"Invalid version: {version_str!r}") from exc


def format_version(version: semver.Version) -> str:
    """Format a version without build metadata."""
    return str(version.replace(build=None))


def is_valid_version(version_str: object) -> bool:
    """Return True when the value is a string holding a valid version."""
    if not isinstance(version_str, str):
        return False
    try:
        parse_version(version_str)
    except InvalidVersionError:
        return False
    return True


def clean_version(version_str: str | None) -> str | None:
    """Normalize a loosely written version ("=v1.2.3 " → "1.2.3").

    Returns None when the value is not a valid version.
    """
    if not version_str:
        return None
    try:
        return format_version(parse_version(_PREFIX_RE.sub("", version_str.strip())))
    except InvalidVersionError:
        return None


def is_prerelease(kind: object) -> bool:
    """Determine whether a release kind produces a prerelease version."""
    return kind in PRERELEASE_TYPES


def is_release_type(value: object) -> bool:
    """Determine whether the value is one of the seven concrete release kinds."""
    return value in RELEASE_TYPES


def is_bump_kind(value: object) -> bool:
    """Determine whether the value is a release kind, including next/conventional."""
    return value in BUMP_KINDS


def _split_prerelease(prerelease: str | None) -> list[int | str]:
    if not prerelease:
        return []
    return [int(p) if p.isdigit() else p for p in prerelease.split(".")]


def _bump_prerelease(parts: list[int | str], preid: str | None) -> list[int | str]:
    """Increment the numeric part of a prerelease, switching identifiers if needed.

    "beta.1" → "beta.2", "beta" → "beta.0", "alpha.3" with preid "beta" →
    "beta.0".
    """
    parts = list(parts)
    if not parts:
        parts = [0]
    else:
        for i in range(len(parts) - 1, -1, -1):
            if isinstance(parts[i], int):
                parts[i] += 1  # type: ignore[operator]
                break
        else:
            parts.append(0)

    if preid:
        if str(parts[0]) == preid:
            if len(parts) < 2 or not isinstance(parts[1], int):
                parts = [preid, 0]
        else:
            parts = [preid, 0]
    return parts


def increment(version_str: str, kind: str, preid: str | None = None) -> str:
    """Return the version produced by bumping version_str by kind.

    Args:
        version_str: Current version.
        kind: One of major, minor, patch, premajor, preminor, prepatch,
              prerelease.
        preid: Prerelease identifier for the prerelease kinds (e.g. "beta").

    Examples:
        increment("1.2.3", "minor") → "1.3.0"
        increment("1.2.3", "prepatch", "beta") → "1.2.4-beta.1"
        increment("1.2.4-beta.1", "prerelease", "beta") → "1.2.4-beta.2"
        increment("2.0.0-rc.1", "major") → "2.0.0"

    Raises:
        InvalidVersionError: If version_str is not a valid version.
        InvalidArgumentError: If kind is not a concrete release kind.
    """
    current = parse_version(version_str)
    major, minor, patch = current.major, current.minor, current.patch
    pre = _split_prerelease(current.prerelease)

    if kind == "major":
        # 2.0.0-beta.1 → 2.0.0, only finalizes the prerelease
        if minor != 0 or patch != 0 or not pre:
            major += 1
        minor = patch = 0
        pre = []
    elif kind == "minor":
        if patch != 0 or not pre:
            minor += 1
        patch = 0
        pre = []
    elif kind == "patch":
        if not pre:
            patch += 1
        pre = []
    elif kind == "premajor":
        major += 1
        minor = patch = 0
        pre = _bump_prerelease([], preid)
    elif kind == "preminor":
        minor += 1
        patch = 0
        pre = _bump_prerelease([], preid)
    elif kind == "prepatch":
        patch += 1
        pre = _bump_prerelease([], preid)
    elif kind == "prerelease":
        if not pre:
            patch += 1
        pre = _bump_prerelease(pre, preid)
    else:
        raise InvalidArgumentError(f"Unknown release type: {kind!r}")

    if is_prerelease(kind) and len(pre) == 2 and pre[0] == preid and pre[1] == 0:
        # Stable → first prerelease should read "-beta.1", not "-beta.0"
        pre[1] = 1

    prerelease = ".".join(str(p) for p in pre) or None
    return str(semver.Version(major, minor, patch, prerelease=prerelease))


def resolve_kind(
    version_str: str,
    kind: str,
    commits: Sequence[GitCommit] | None = None,
) -> str:
    """Map the next/conventional meta-kinds onto a concrete release kind.

    next: prerelease → "prerelease", otherwise "patch".
    conventional: prerelease → "prerelease", otherwise the bump inferred
    from the commits.
    """
    if kind not in (NEXT_TYPE, CONVENTIONAL_TYPE):
        return kind
    if parse_version(version_str).prerelease:
        return "prerelease"
    if kind == NEXT_TYPE:
        return "patch"
    return determine_semver_change(commits or [])


def get_next_version(
    version_str: str,
    kind: str,
    preid: str | None = None,
    commits: Sequence[GitCommit] | None = None,
) -> str:
    """Return the next version for any bump kind, including next/conventional."""
    if not is_bump_kind(kind):
        raise InvalidArgumentError(f"Unknown release type: {kind!r}")
    return increment(version_str, resolve_kind(version_str, kind, commits), preid)


def get_next_versions(
    version_str: str,
    preid: str,
    commits: Sequence[GitCommit] | None = None,
) -> dict[str, str]:
    """Compute the candidate next version for every bump kind.

    When the current version already carries a named prerelease
    ("1.0.0-alpha.2"), that identifier is used instead of preid so the
    candidates continue the current prerelease line.
    """
    pre = _split_prerelease(parse_version(version_str).prerelease)
    if pre and isinstance(pre[0], str):
        preid = pre[0]
    return {
        kind: get_next_version(version_str, kind, preid, commits) for kind in BUMP_KINDS
    }
