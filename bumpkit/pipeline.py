"""Version bump pipeline: discover → resolve → update → commit → tag → push.

This module orchestrates a bumpkit run:
1. Normalize the options and check the git working tree
2. Discover the current version across the target manifests
3. Resolve the new version (explicit, bump kind, or interactive prompt)
4. Confirm the plan with the user
5. Update every target file, running the npm lifecycle scripts around it
6. Run the install command and the execute hook
7. Commit, tag and push the release
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .current_version import candidate_files, get_current_version
from .errors import UserAbort, VersionNotFoundError
from .git import check_git_status, format_version_string, git_commit, git_push, git_tag
from .jsonedit import parse_jsonc
from .operation import Operation, ProgressCallback, ProgressEvent
from .options import RawOptions, dump_options
from .prompt import ClickPrompter, Prompter
from .publish_tag import resolve_publish_tag
from .resolver import get_new_version
from .shell import info, run, step
from .update_files import update_files

LOG = logging.getLogger(__name__)

NPM_PREVERSION = "preversion"
NPM_VERSION = "version"
NPM_POSTVERSION = "postversion"


def require_current_version(operation: Operation) -> None:
    """Fail when no current version was given or discovered.

    Raises:
        VersionNotFoundError: Naming every file that was checked.
    """
    if operation.state.current_version:
        return
    json_files, cargo_files = candidate_files(operation)
    cwd = Path(operation.options.cwd)
    checked = [f for f in json_files + cargo_files if (cwd / f).is_file()] or json_files
    raise VersionNotFoundError(
        "Unable to determine the current version number. Checked "
        + ", ".join(checked)
        + ". Use --current-version to set it explicitly."
    )


def print_summary(operation: Operation) -> None:
    """Print what the run is about to do."""
    options = operation.options
    state = operation.state
    step(f"Bumping {state.current_version} → {state.new_version}")
    if state.current_version_source:
        info(f"current version from {state.current_version_source}")
    for path in options.files:
        info(f"files   {path}")
    if options.commit:
        info(f"commit  {format_version_string(options.commit.message, state.new_version)}")
    if options.tag:
        info(f"tag     {format_version_string(options.tag.name, state.new_version)}")
    if options.execute:
        info(f"execute {options.execute if isinstance(options.execute, str) else 'callback'}")
    if options.push:
        info("push    yes")


def confirm_bump(operation: Operation, prompter: Prompter) -> None:
    """Ask for confirmation before anything is written.

    Raises:
        UserAbort: If the user declines.
    """
    print_summary(operation)
    if not prompter.confirm("Bump?", default=True):
        raise UserAbort("Aborted, nothing was changed")


def npm_scripts(cwd: str) -> Mapping[str, Any]:
    """Return the scripts table of the package.json in cwd, empty when there is none."""
    path = Path(cwd) / "package.json"
    if not path.is_file():
        return {}
    data = parse_jsonc(path.read_text(encoding="utf-8"))
    scripts = data.get("scripts") if isinstance(data, Mapping) else None
    return scripts if isinstance(scripts, Mapping) else {}


def run_npm_script(operation: Operation, name: str) -> Operation:
    """Run an npm lifecycle script when package.json defines it."""
    options = operation.options
    if options.ignore_scripts or name not in npm_scripts(options.cwd):
        return operation
    run(f"npm run {name} --silent", cwd=options.cwd)
    return operation.update(event=ProgressEvent.NPM_SCRIPT, detail=name)


def run_install(operation: Operation) -> Operation:
    if operation.options.install:
        step("Running npm install")
        run("npm install", cwd=operation.options.cwd)
    return operation


def run_execute(operation: Operation) -> Operation:
    """Run the execute hook: a shell command, or a callable given the operation."""
    execute = operation.options.execute
    if not execute or operation.options.ignore_scripts:
        return operation
    if isinstance(execute, str):
        step(f"Executing {execute}")
        run(execute, cwd=operation.options.cwd)
    else:
        execute(operation)
    return operation


def version_bump(
    options: RawOptions | Mapping[str, Any] | None = None,
    progress: ProgressCallback | None = None,
    prompter: Prompter | None = None,
) -> Operation:
    """Bump the version of the target files and release it with git.

    Args:
        options: Raw options, e.g. from load_bump_config().
        progress: Called with every progress event.
        prompter: Answers interactive questions; the terminal by default.

    Returns:
        The finished operation, with the full state of the run.
    """
    operation = Operation.start(options, progress)
    opts = operation.options
    prompter = prompter or ClickPrompter()
    LOG.debug("Options: %s", dump_options(opts))

    # Refuse to mix unrelated changes into the release commit
    if opts.commit and not opts.commit.all and not opts.no_git_check:
        check_git_status(opts.cwd)

    get_current_version(operation)
    require_current_version(operation)
    get_new_version(operation, prompter)

    if opts.confirm and opts.interface:
        confirm_bump(operation, prompter)

    resolve_publish_tag(operation, prompter)

    run_npm_script(operation, NPM_PREVERSION)
    update_files(operation)
    run_install(operation)
    run_execute(operation)
    run_npm_script(operation, NPM_VERSION)

    git_commit(operation)
    git_tag(operation)
    run_npm_script(operation, NPM_POSTVERSION)
    git_push(operation)

    operation.reset_cache()
    return operation
