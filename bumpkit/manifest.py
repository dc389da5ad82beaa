"""npm-style JSON manifest handling.

Covers package.json, package-lock.json, jsr.json(c), deno.json(c) and the
legacy bower/component manifests. Reads use the same JSONC-tolerant parser
as the edits, so a commented deno.jsonc is handled like any package.json.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .jsonedit import MISSING, JsonDocument
from .models import VersionSource
from .versions import is_valid_version

JSON_MANIFEST_NAMES = frozenset(
    {
        "package.json",
        "package-lock.json",
        "bower.json",
        "component.json",
        "jsr.json",
        "jsr.jsonc",
        "deno.json",
        "deno.jsonc",
    }
)

LATEST_TAG = "latest"


def is_json_manifest(path: str | Path) -> bool:
    """Determine whether the file name is a known JSON manifest."""
    return Path(path).name.strip() in JSON_MANIFEST_NAMES


def is_manifest(data: Any) -> bool:
    """Determine whether parsed data looks like a package manifest.

    name, version and description must each be a string when present.
    """
    if not isinstance(data, Mapping):
        return False
    return all(
        data.get(key) is None or isinstance(data.get(key), str)
        for key in ("name", "version", "description")
    )


def is_package_lock(data: Any) -> bool:
    """Determine whether parsed data is a package-lock.json (root entry keyed by "")."""
    if not isinstance(data, Mapping):
        return False
    packages = data.get("packages")
    if not isinstance(packages, Mapping):
        return False
    root = packages.get("")
    return isinstance(root, Mapping) and isinstance(root.get("version"), str)


def load_manifest(path: Path) -> JsonDocument:
    """Load a JSON/JSONC manifest for reading and in-place editing."""
    with path.open(encoding="utf-8", newline="") as f:
        return JsonDocument(f.read())


def get_manifest_version(data: Any) -> str | None:
    """Return the valid version held by a parsed manifest, if any.

    The top-level "version" field wins; lockfiles fall back to the root
    package entry (packages[""].version).
    """
    if not isinstance(data, Mapping):
        return None
    if is_valid_version(data.get("version")):
        return str(data["version"])
    if is_package_lock(data) and is_valid_version(data["packages"][""]["version"]):
        return str(data["packages"][""]["version"])
    return None


def read_manifest_version(path: str | Path) -> VersionSource | None:
    """Read the current version from a JSON manifest, None when absent or invalid."""
    data = load_manifest(Path(path)).data
    version = get_manifest_version(data)
    if version is None:
        return None
    return VersionSource(source=str(path), version=version)


def _apply_publish_tag(doc: JsonDocument, publish_tag: str) -> bool:
    """Sync publishConfig.tag with the resolved publish tag.

    "latest" is npm's default dist-tag, so it is expressed by removing the
    field (and an emptied publishConfig) rather than writing it.
    """
    publish_config = doc.get(["publishConfig"], None)
    current = publish_config.get("tag") if isinstance(publish_config, Mapping) else None

    if publish_tag == LATEST_TAG:
        if current is None:
            return False
        if len(publish_config) == 1:
            doc.remove(["publishConfig"])
        else:
            doc.remove(["publishConfig", "tag"])
        return True

    if current == publish_tag:
        return False
    doc.set(["publishConfig", "tag"], publish_tag)
    return True


def update_manifest_file(
    path: str | Path,
    new_version: str,
    publish_tag: str | None = None,
) -> bool:
    """Update the version (and optionally publishConfig.tag) of a JSON manifest.

    Files without a top-level "version" field are not version-bearing
    manifests and are skipped untouched. Lockfiles also get their root
    package entry updated.

    Returns:
        True if the file was modified.
    """
    path = Path(path)
    doc = load_manifest(path)
    data = doc.data
    if not isinstance(data, Mapping) or "version" not in data:
        return False

    modified = False
    if is_manifest(data) and data["version"] != new_version:
        doc.set(["version"], new_version)
        if is_package_lock(data) and doc.get(["packages", "", "version"]) is not MISSING:
            doc.set(["packages", "", "version"], new_version)
        modified = True

    if publish_tag and path.name == "package.json":
        modified = _apply_publish_tag(doc, publish_tag) or modified

    if modified:
        path.write_text(doc.text, encoding="utf-8", newline="")
    return modified
