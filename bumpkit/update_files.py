"""Apply the new version to every target file."""

from __future__ import annotations

import re
from pathlib import Path

from .cargo import update_cargo_file
from .manifest import is_json_manifest, update_manifest_file
from .operation import Operation, ProgressEvent

CARGO_MANIFEST = "Cargo.toml"


def update_text_file(path: str | Path, old_version: str, new_version: str) -> bool:
    """Replace every whole-word occurrence of old_version with new_version.

    "1.2.3" inside "11.2.34" is left alone, "v1.2.3" becomes "v1.3.0".
    Line endings are written back as they were read.

    Returns:
        True if the file was modified.
    """
    path = Path(path)
    with path.open(encoding="utf-8", newline="") as f:
        text = f.read()
    pattern = re.compile(rf"(?:\b|(?<=\bv)){re.escape(old_version)}\b")
    updated = pattern.sub(lambda _: new_version, text)
    if updated == text:
        return False
    path.write_text(updated, encoding="utf-8", newline="")
    return True


def update_file(operation: Operation, rel_path: str) -> bool:
    """Update a single file, dispatching on its name."""
    state = operation.state
    path = Path(operation.options.cwd) / rel_path

    if is_json_manifest(path):
        return update_manifest_file(path, state.new_version, state.publish_tag or None)
    if path.name == CARGO_MANIFEST:
        return update_cargo_file(path, state.new_version, operation.cache)
    return update_text_file(path, state.current_version, state.new_version)


def update_files(operation: Operation) -> Operation:
    """Update all target files in list order.

    Modified files are appended to state.updated_files, the others to
    state.skipped_files, each with its progress event.
    """
    for rel_path in operation.options.files:
        if update_file(operation, rel_path):
            operation.update(
                event=ProgressEvent.FILE_UPDATED,
                updated_files=[rel_path],
                detail=rel_path,
            )
        else:
            operation.update(
                event=ProgressEvent.FILE_SKIPPED,
                skipped_files=[rel_path],
                detail=rel_path,
            )
    return operation
