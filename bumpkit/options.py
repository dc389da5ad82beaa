"""Option normalization and target file discovery.

Converts loosely typed RawOptions (from the CLI, a config file or the
Python API) into the frozen NormalizedOptions every pipeline stage reads.
"""

from __future__ import annotations

import glob
import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, Union

import tomlkit
import yaml
from pydantic import BaseModel, ConfigDict

from .cargo import get_workspace_member_globs
from .errors import ConfigurationError
from .jsonedit import JsonEditError, parse_jsonc
from .models import (
    DEFAULT_PREID,
    BumpRelease,
    PromptRelease,
    Release,
    VersionRelease,
)
from .versions import is_bump_kind

DEFAULT_COMMIT_MESSAGE = "chore: release v"
DEFAULT_TAG_NAME = "v"

DEFAULT_FILES = (
    "package.json",
    "package-lock.json",
    "jsr.json",
    "jsr.jsonc",
    "deno.json",
    "deno.jsonc",
    "Cargo.toml",
)
RECURSIVE_FILES = (
    "package.json",
    "package-lock.json",
    "packages/**/package.json",
    "jsr.json",
    "jsr.jsonc",
    "deno.json",
    "deno.jsonc",
    "Cargo.toml",
)
IGNORED_DIRS = frozenset(
    {".git", "node_modules", "bower_components", "__tests__", "fixtures", "fixture"}
)

ExecuteHook = Union[str, Callable[..., Any]]
CustomVersionHook = Callable[..., str | None]


class RawOptions(BaseModel):
    """Options as given by the user; every field is optional."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    release: str | None = None
    preid: str | None = None
    commit: bool | str | None = None
    tag: bool | str | None = None
    sign: bool = False
    push: bool = False
    all: bool = False
    no_verify: bool = False
    no_git_check: bool = False
    install: bool = False
    ignore_scripts: bool = False
    recursive: bool = False
    confirm: bool = True
    interface: bool = True
    print_commits: bool = True
    files: list[str] | None = None
    cwd: str | None = None
    execute: ExecuteHook | None = None
    custom_version: CustomVersionHook | None = None
    current_version: str | None = None
    publish_tag: bool | str | None = None


class CommitOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    no_verify: bool = False
    all: bool = False


class TagOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


class NormalizedOptions(BaseModel):
    """Normalized and sanitized options, read-only for the rest of the run.

    Attributes:
        release: What version change was requested.
        commit: Commit settings, None when no commit is made.
        tag: Tag settings, None when no tag is created.
        files: Target files relative to cwd, in discovery order.
        interface: Whether interactive prompts are possible.
        execute: Shell command or callable run after the files are updated.
        custom_version: Hook suggesting a version for the prompt; called
                        with the current version and the semver module.
        current_version: Override for the current version.
        publish_tag: npm dist-tag to record in publishConfig.tag, or True to
                     prompt for it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    release: Release
    commit: CommitOptions | None = None
    tag: TagOptions | None = None
    sign: bool = False
    push: bool = False
    files: tuple[str, ...] = ()
    cwd: str = "."
    install: bool = False
    interface: bool = True
    ignore_scripts: bool = False
    execute: ExecuteHook | None = None
    print_commits: bool = True
    confirm: bool = True
    no_git_check: bool = False
    custom_version: CustomVersionHook | None = None
    current_version: str | None = None
    publish_tag: bool | str | None = None


def parse_release(release: str | None, preid: str) -> Release:
    """Map a raw release argument onto the Release union.

    Absent or "prompt" → PromptRelease, a release kind (including next and
    conventional) → BumpRelease, anything else → VersionRelease (validated
    when the new version is resolved).
    """
    if not release or release == "prompt":
        return PromptRelease(preid=preid)
    if is_bump_kind(release):
        return BumpRelease(type=release, preid=preid)  # type: ignore[arg-type]
    return VersionRelease(version=release)


def _read_pnpm_workspaces(root: Path) -> list[str]:
    path = root / "pnpm-workspace.yaml"
    if not path.exists():
        return []
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return [str(p) for p in data.get("packages") or []]


def _read_npm_workspaces(root: Path) -> list[str]:
    """Workspaces from package.json: a list or {"packages": [...]} (yarn/bun)."""
    path = root / "package.json"
    if not path.exists():
        return []
    try:
        data = parse_jsonc(path.read_text(encoding="utf-8"))
    except JsonEditError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc
    workspaces = data.get("workspaces") if isinstance(data, Mapping) else None
    if isinstance(workspaces, Mapping):
        workspaces = workspaces.get("packages")
    return [str(w) for w in workspaces] if isinstance(workspaces, list) else []


def _read_cargo_workspaces(root: Path) -> list[str]:
    path = root / "Cargo.toml"
    if not path.exists():
        return []
    return get_workspace_member_globs(tomlkit.parse(path.read_text(encoding="utf-8")))


def workspace_file_patterns(cwd: str | Path) -> list[str]:
    """Collect manifest patterns for every workspace member declared in cwd.

    npm/pnpm/yarn/bun members get "<member>/package.json", Cargo members
    get "<member>/Cargo.toml".
    """
    root = Path(cwd)
    patterns = [f"{ws}/package.json" for ws in _read_pnpm_workspaces(root)]
    patterns += [f"{ws}/package.json" for ws in _read_npm_workspaces(root)]
    patterns += [f"{member}/Cargo.toml" for member in _read_cargo_workspaces(root)]
    return patterns


def resolve_file_patterns(files: list[str] | None, recursive: bool, cwd: str | Path) -> list[str]:
    """Return the glob patterns to expand for this run."""
    if files:
        return list(files)
    if not recursive:
        return list(DEFAULT_FILES)

    patterns = list(RECURSIVE_FILES)
    for pattern in workspace_file_patterns(cwd):
        # "!" patterns exclude members, we simply never add them
        if not pattern.startswith("!") and pattern not in patterns:
            patterns.append(pattern)
    return patterns


def expand_file_patterns(patterns: Iterable[str], cwd: str | Path) -> list[str]:
    """Expand glob patterns relative to cwd into a de-duplicated file list.

    "**" matches recursively. Directories, and anything inside .git,
    node_modules, bower_components, __tests__ or fixture(s) directories,
    are skipped. Matches of each pattern are sorted; pattern order is kept.
    """
    root = Path(cwd)
    seen: set[str] = set()
    files: list[str] = []
    for pattern in patterns:
        for match in sorted(glob.glob(pattern, root_dir=root, recursive=True)):
            rel = Path(match)
            if any(part in IGNORED_DIRS for part in rel.parts):
                continue
            if not (root / rel).is_file():
                continue
            key = rel.as_posix()
            if key not in seen:
                seen.add(key)
                files.append(key)
    return files


def normalize_options(raw: RawOptions | Mapping[str, Any] | None = None) -> NormalizedOptions:
    """Convert raw options to a normalized and sanitized NormalizedOptions.

    Raises:
        ConfigurationError: If a prompt is requested while the interactive
                            interface is disabled.
    """
    if raw is None:
        raw = RawOptions()
    elif not isinstance(raw, RawOptions):
        raw = RawOptions(**raw)

    preid = raw.preid if isinstance(raw.preid, str) and raw.preid else DEFAULT_PREID
    cwd = str(Path(raw.cwd) if raw.cwd else Path.cwd())
    release = parse_release(raw.release, preid)

    if isinstance(release, PromptRelease) and not raw.interface:
        raise ConfigurationError(
            "Cannot prompt for the version number because the interactive interface has been disabled."
        )

    tag = None
    if isinstance(raw.tag, str):
        tag = TagOptions(name=raw.tag)
    elif raw.tag:
        tag = TagOptions(name=DEFAULT_TAG_NAME)

    # Must come after tag and push: tagging or pushing implies a commit
    commit = None
    if isinstance(raw.commit, str):
        commit = CommitOptions(message=raw.commit, no_verify=raw.no_verify, all=raw.all)
    elif raw.commit or tag or raw.push:
        commit = CommitOptions(message=DEFAULT_COMMIT_MESSAGE, no_verify=raw.no_verify, all=raw.all)

    patterns = resolve_file_patterns(raw.files, raw.recursive, cwd)
    files = expand_file_patterns(patterns, cwd)

    return NormalizedOptions(
        release=release,
        commit=commit,
        tag=tag,
        sign=raw.sign,
        push=raw.push,
        files=tuple(files),
        cwd=cwd,
        install=raw.install,
        interface=raw.interface,
        ignore_scripts=raw.ignore_scripts,
        execute=raw.execute,
        print_commits=raw.print_commits,
        confirm=raw.confirm,
        no_git_check=raw.no_git_check,
        custom_version=raw.custom_version,
        current_version=raw.current_version,
        publish_tag=raw.publish_tag,
    )


def dump_options(options: NormalizedOptions) -> str:
    """Render the serializable part of the options as JSON, for --verbose output."""
    return json.dumps(
        options.model_dump(exclude={"execute", "custom_version"}, mode="json"),
        indent=2,
    )
