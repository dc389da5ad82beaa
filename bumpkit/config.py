"""Configuration file loading.

Settings are read from the first of bumpkit.toml, .bumpkit.toml or the
[tool.bumpkit] table of pyproject.toml found in the working directory, then
merged under the command-line overrides.

Example bumpkit.toml:

    commit = "chore: release v%s"
    tag = "v%s"
    push = false
    files = ["package.json", "crates/*/Cargo.toml"]
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, ConfigDict, ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigurationError
from .options import RawOptions

CONFIG_FILE_NAMES = ("bumpkit.toml", ".bumpkit.toml")
PYPROJECT_TABLE = "bumpkit"


def _dashed(name: str) -> str:
    return name.replace("_", "-")


class BumpConfig(BaseModel):
    """Settings that may appear in a config file, with their defaults.

    Keys may be written with dashes or underscores (no-verify / no_verify).
    """

    model_config = ConfigDict(extra="forbid", alias_generator=_dashed, populate_by_name=True)

    release: str | None = None
    preid: str | None = None
    commit: bool | str = True
    tag: bool | str = True
    push: bool = True
    sign: bool = False
    all: bool = False
    no_verify: bool = False
    no_git_check: bool = False
    install: bool = False
    ignore_scripts: bool = False
    recursive: bool = False
    confirm: bool = True
    interface: bool = True
    print_commits: bool = True
    files: list[str] = []
    execute: str | None = None
    current_version: str | None = None
    publish_tag: bool | str | None = None


def find_config_file(cwd: Path) -> tuple[Path, Mapping[str, Any]] | None:
    """Locate the config file in cwd and return it with its raw settings table."""
    for name in CONFIG_FILE_NAMES:
        path = cwd / name
        if path.is_file():
            return path, _parse(path)

    pyproject = cwd / "pyproject.toml"
    if pyproject.is_file():
        table = _parse(pyproject).get("tool", {}).get(PYPROJECT_TABLE)
        if table is not None:
            return pyproject, table
    return None


def _parse(path: Path) -> dict[str, Any]:
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
    except TOMLKitError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc


def load_config(cwd: str | Path | None = None) -> BumpConfig:
    """Load the config file settings for cwd, defaults when there is none.

    Raises:
        ConfigurationError: If the file is not valid TOML or holds unknown
                            or mistyped settings.
    """
    root = Path(cwd) if cwd else Path.cwd()
    found = find_config_file(root)
    if found is None:
        return BumpConfig()
    path, table = found
    try:
        return BumpConfig.model_validate(table)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{exc}") from exc


def load_bump_config(
    overrides: Mapping[str, Any] | None = None,
    cwd: str | Path | None = None,
) -> RawOptions:
    """Merge overrides over config file settings over defaults.

    Override values of None mean "not given" and do not replace a setting.
    Overrides may also carry the non-serializable Python API hooks
    (custom_version, a callable execute).
    """
    root = Path(cwd) if cwd else Path.cwd()
    settings = load_config(root).model_dump()
    for key, value in (overrides or {}).items():
        if value is not None:
            settings[key] = value
    settings["cwd"] = str(root)
    return RawOptions(**settings)
