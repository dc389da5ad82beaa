"""The Operation: options plus accumulated state for one bumpkit run.

Every pipeline stage receives the operation, reads its options and reports
results through Operation.update(), which computes the next state snapshot
from the current one and a patch, enforcing the state invariants.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from .cargo import CargoTomlCache
from .errors import InvalidVersionError, OperationStateError
from .options import NormalizedOptions, RawOptions, normalize_options
from .versions import is_valid_version


class ProgressEvent(str, Enum):
    FILE_UPDATED = "file updated"
    FILE_SKIPPED = "file skipped"
    GIT_COMMIT = "git commit"
    GIT_TAG = "git tag"
    GIT_PUSH = "git push"
    NPM_SCRIPT = "npm script"


class OperationState(BaseModel):
    """Snapshot of everything a run has determined so far.

    Attributes:
        release: The concrete release kind applied, when there was one.
        current_version_source: File the current version was read from,
                                or "user" for an explicit override.
        updated_files: Files actually modified, in order, append-only.
        skipped_files: Files left untouched by the update.
        event: The last progress event.
    """

    model_config = ConfigDict(frozen=True)

    release: str | None = None
    current_version_source: str = ""
    current_version: str = ""
    new_version: str = ""
    commit_message: str = ""
    tag_name: str = ""
    publish_tag: str = ""
    updated_files: tuple[str, ...] = ()
    skipped_files: tuple[str, ...] = ()
    event: ProgressEvent | None = None


ProgressCallback = Callable[[ProgressEvent, "Operation", str | None], None]


def apply_patch(
    state: OperationState,
    patch: Mapping[str, Any],
    updated_files: Iterable[str] = (),
    skipped_files: Iterable[str] = (),
) -> OperationState:
    """Compute the next state from state and patch.

    updated_files/skipped_files are appended to the existing tuples.

    Raises:
        OperationStateError: If the patch sets an invalid version, sets
            new_version before current_version is known, clears a version
            that was already set, or repeats an updated file.
    """
    if "updated_files" in patch or "skipped_files" in patch:
        raise OperationStateError("File lists are append-only, pass them separately")
    unknown = set(patch) - set(OperationState.model_fields)
    if unknown:
        raise OperationStateError(f"Unknown state fields: {sorted(unknown)}")

    for field in ("current_version", "new_version"):
        if field not in patch:
            continue
        value = patch[field]
        if not value and getattr(state, field):
            raise OperationStateError(f"{field} can not be cleared once set")
        if value and not is_valid_version(value):
            raise OperationStateError(f"{field} is not a valid version: {value!r}")

    current = patch.get("current_version", state.current_version)
    if patch.get("new_version") and not current:
        raise OperationStateError("new_version can not be set before current_version is known")

    files = list(state.updated_files)
    for path in updated_files:
        if path in files:
            raise OperationStateError(f"{path} is already listed as updated")
        files.append(path)

    return state.model_copy(
        update={
            **patch,
            "updated_files": tuple(files),
            "skipped_files": state.skipped_files + tuple(skipped_files),
        }
    )


class Operation:
    """Options, state and per-run resources of a single version bump.

    Attributes:
        options: Frozen normalized options.
        state: The authoritative state snapshot; replaced on every update().
        cache: Parsed Cargo.toml documents for this run.
    """

    def __init__(
        self, options: NormalizedOptions, progress: ProgressCallback | None = None
    ) -> None:
        self.options = options
        self.state = OperationState()
        self.cache = CargoTomlCache()
        self._progress = progress

    @classmethod
    def start(
        cls,
        raw: RawOptions | Mapping[str, Any] | None = None,
        progress: ProgressCallback | None = None,
    ) -> Operation:
        """Normalize raw options and create the operation.

        An explicit current version is recorded right away with the source
        "user".

        Raises:
            InvalidVersionError: If the explicit current version is not valid.
        """
        options = normalize_options(raw)
        if options.current_version and not is_valid_version(options.current_version):
            raise InvalidVersionError(f"{options.current_version} is not a valid version number")
        operation = cls(options, progress)
        if options.current_version:
            operation.update(
                current_version=options.current_version,
                current_version_source="user",
            )
        return operation

    def update(
        self,
        *,
        updated_files: Iterable[str] = (),
        skipped_files: Iterable[str] = (),
        detail: str | None = None,
        **patch: Any,
    ) -> Operation:
        """Replace the state with the next snapshot and report its event.

        Args:
            updated_files: Files to append to state.updated_files.
            skipped_files: Files to append to state.skipped_files.
            detail: Extra information for the progress callback (e.g. the
                    file an event is about).
            **patch: OperationState fields to set.

        Returns:
            The operation itself, so stages can ``return operation.update(...)``.
        """
        self.state = apply_patch(self.state, patch, updated_files, skipped_files)
        event = patch.get("event")
        if event is not None and self._progress is not None:
            self._progress(event, self, detail)
        return self

    def reset_cache(self) -> None:
        """Drop cached manifests so the next read goes to disk."""
        self.cache.clear()
