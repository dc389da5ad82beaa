"""Cargo.toml reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying Cargo.toml
files, so a version bump only touches the version strings themselves.

Version fields live in four places:
- [package].version
- [workspace.package].version (shared by workspace members)
- [dependencies].<name>.version for internal (path) dependencies
- [workspace.dependencies].<name>.version for internal (path) dependencies
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import tomlkit
from tomlkit.items import String, StringType

from .models import VersionSource
from .versions import is_valid_version


@dataclass(frozen=True)
class ExternalDependency:
    """A registry/git dependency: a bare version string or a table without path."""

    spec: str | None


@dataclass(frozen=True)
class InternalDependency:
    """A same-repository dependency carrying both a path and a version."""

    version: str
    path: str


@dataclass(frozen=True)
class PathOnlyDependency:
    """A local dependency without a version requirement."""

    path: str


Dependency = Union[ExternalDependency, InternalDependency, PathOnlyDependency]


def classify_dependency(value: Any) -> Dependency:
    """Classify a dependency map value.

    Examples:
        "1.0" → ExternalDependency("1.0")
        { version = "1.0.0", path = "../a" } → InternalDependency
        { path = "../a" } → PathOnlyDependency
        { version = "1.0" } / { workspace = true } → ExternalDependency
    """
    if isinstance(value, Mapping):
        path = value.get("path")
        version = value.get("version")
        if isinstance(path, str) and isinstance(version, str):
            return InternalDependency(version=str(version), path=str(path))
        if isinstance(path, str):
            return PathOnlyDependency(path=str(path))
        return ExternalDependency(spec=str(version) if isinstance(version, str) else None)
    return ExternalDependency(spec=str(value))


class CargoTomlCache:
    """Parsed Cargo.toml documents keyed by resolved path.

    Owned by one operation so that a manifest read during version discovery
    is not parsed again when it is updated. Call clear() between runs.
    """

    def __init__(self) -> None:
        self._docs: dict[str, tomlkit.TOMLDocument] = {}

    @staticmethod
    def _key(path: str | Path) -> str:
        return str(Path(path).resolve())

    def load(self, path: str | Path) -> tomlkit.TOMLDocument:
        """Return the parsed document for path, reading it on first access."""
        key = self._key(path)
        if key not in self._docs:
            self._docs[key] = load_cargo_toml(Path(path))
        return self._docs[key]

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and self._key(path) in self._docs

    def __len__(self) -> int:
        return len(self._docs)

    def clear(self) -> None:
        self._docs.clear()


def load_cargo_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a Cargo.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    with path.open(encoding="utf-8", newline="") as f:
        return tomlkit.parse(f.read())


def save_cargo_toml(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc), encoding="utf-8", newline="")


def _table(doc: Mapping[str, Any], *keys: str) -> Mapping[str, Any] | None:
    node: Any = doc
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node if isinstance(node, Mapping) else None


def _dependency_tables(doc: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    """Yield [dependencies] then [workspace.dependencies], when present."""
    for keys in (("dependencies",), ("workspace", "dependencies")):
        table = _table(doc, *keys)
        if table is not None:
            yield table


def _first_internal_version(dependencies: Mapping[str, Any]) -> str | None:
    for value in dependencies.values():
        dep = classify_dependency(value)
        if isinstance(dep, InternalDependency) and is_valid_version(dep.version):
            return dep.version
    return None


def _version_item(current: Any, new_version: str) -> String:
    """Render new_version with the quoting of the value it replaces."""
    literal = isinstance(current, String) and current.type == StringType.SLL
    return tomlkit.string(new_version, literal=literal)


def get_cargo_version(doc: Mapping[str, Any]) -> str | None:
    """Find the current version in a parsed Cargo.toml.

    Priority order, first valid version wins:
    1. [package].version
    2. [workspace.package].version
    3. first internal dependency in [dependencies]
    4. first internal dependency in [workspace.dependencies]
    """
    for keys in (("package",), ("workspace", "package")):
        table = _table(doc, *keys)
        if table is not None and is_valid_version(table.get("version")):
            return str(table["version"])

    for dependencies in _dependency_tables(doc):
        version = _first_internal_version(dependencies)
        if version:
            return version
    return None


def read_cargo_version(
    paths: Iterable[str | Path], cache: CargoTomlCache
) -> VersionSource | None:
    """Return the first version found across paths, or None.

    Paths are evaluated in order and the priority rules of get_cargo_version
    are applied per file, so a dependency version in the first file beats a
    package version in the second.
    """
    for path in paths:
        version = get_cargo_version(cache.load(path))
        if version:
            return VersionSource(source=str(path), version=version)
    return None


def set_cargo_version(doc: Mapping[str, Any], new_version: str) -> bool:
    """Apply new_version to every version field of a parsed Cargo.toml.

    Dependencies are only touched when they carry both a path and a valid
    version; bare version strings and path-only entries are left alone.

    Returns:
        True if any field changed.
    """
    modified = False

    for keys in (("package",), ("workspace", "package")):
        table = _table(doc, *keys)
        if table is None:
            continue
        current = table.get("version")
        if isinstance(current, str) and current and current != new_version:
            table["version"] = _version_item(current, new_version)  # type: ignore[index]
            modified = True

    # Every entry is evaluated, no early exit
    for dependencies in _dependency_tables(doc):
        for value in dependencies.values():
            dep = classify_dependency(value)
            if (
                isinstance(dep, InternalDependency)
                and dep.version != new_version
                and is_valid_version(dep.version)
            ):
                value["version"] = _version_item(value["version"], new_version)
                modified = True

    return modified


def update_cargo_file(path: str | Path, new_version: str, cache: CargoTomlCache) -> bool:
    """Update the version fields of a Cargo.toml in place.

    The file is only rewritten when something changed.

    Returns:
        True if the file was modified.
    """
    doc = cache.load(path)
    modified = set_cargo_version(doc, new_version)
    if modified:
        save_cargo_toml(Path(path), doc)
    return modified


def get_workspace_member_globs(doc: Mapping[str, Any]) -> list[str]:
    """Extract [workspace].members glob patterns, empty when not a workspace."""
    workspace = _table(doc, "workspace")
    members = workspace.get("members") if workspace is not None else None
    return [str(m) for m in members] if members else []
