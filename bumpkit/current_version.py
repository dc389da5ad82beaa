"""Current version discovery."""

from __future__ import annotations

from pathlib import Path

from .cargo import read_cargo_version
from .manifest import is_json_manifest, read_manifest_version
from .operation import Operation
from .update_files import CARGO_MANIFEST

PRIMARY_MANIFESTS = ("package.json", "deno.json", "deno.jsonc", "jsr.json", "jsr.jsonc")


def candidate_files(operation: Operation) -> tuple[list[str], list[str]]:
    """Return the (JSON manifests, Cargo manifests) to look for a version in.

    The well-known manifests in cwd come first, followed by the JSON
    manifests of the target file list.
    """
    json_files = list(PRIMARY_MANIFESTS)
    cargo_files: list[str] = []
    for rel_path in operation.options.files:
        if is_json_manifest(rel_path):
            if rel_path not in json_files:
                json_files.append(rel_path)
        elif Path(rel_path).name == CARGO_MANIFEST:
            cargo_files.append(rel_path)
    return json_files, cargo_files


def get_current_version(operation: Operation) -> Operation:
    """Record the current version and where it came from.

    An explicit current version wins. Otherwise the first JSON manifest with
    a valid version is used, then the Cargo manifests. When nothing matches
    the state is left without a current version.
    """
    if operation.state.current_version:
        return operation

    cwd = Path(operation.options.cwd)
    json_files, cargo_files = candidate_files(operation)

    for rel_path in json_files:
        path = cwd / rel_path
        if not path.is_file():
            continue
        found = read_manifest_version(path)
        if found:
            return operation.update(
                current_version=found.version, current_version_source=rel_path
            )

    found = read_cargo_version([cwd / rel_path for rel_path in cargo_files], operation.cache)
    if found:
        return operation.update(
            current_version=found.version,
            current_version_source=Path(found.source).relative_to(cwd).as_posix(),
        )
    return operation
