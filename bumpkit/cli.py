"""CLI entry point for bumpkit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
from tomlkit.exceptions import TOMLKitError

from .config import load_bump_config
from .errors import BumpkitError, ExitCode
from .jsonedit import JsonEditError
from .operation import Operation, ProgressEvent
from .pipeline import version_bump
from .shell import error, info, set_quiet, warn
from .versions import is_bump_kind, is_valid_version

SUCCESS = click.style("✔", fg="green")
SKIP = click.style("–", dim=True)


class BumpCommand(click.Command):
    """Command reporting usage errors with the invalid-argument exit code."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = ExitCode.INVALID_ARGUMENT
            raise


def split_release(args: tuple[str, ...]) -> tuple[str | None, list[str]]:
    """Separate the release from the file patterns.

    The first argument is the release when it is "prompt", a release kind
    or a valid version number; everything else is a file pattern.
    """
    if args and (args[0] == "prompt" or is_bump_kind(args[0]) or is_valid_version(args[0])):
        return args[0], list(args[1:])
    return None, list(args)


def print_progress(event: ProgressEvent, operation: Operation, detail: str | None) -> None:
    """Print one line per progress event."""
    state = operation.state
    if event == ProgressEvent.FILE_UPDATED:
        info(f"{SUCCESS} Updated {detail} to {state.new_version}")
    elif event == ProgressEvent.FILE_SKIPPED:
        info(f"{SKIP} {detail} did not need to be updated")
    elif event == ProgressEvent.GIT_COMMIT:
        info(f"{SUCCESS} Git commit")
    elif event == ProgressEvent.GIT_TAG:
        info(f"{SUCCESS} Git tag {state.tag_name}")
    elif event == ProgressEvent.GIT_PUSH:
        info(f"{SUCCESS} Git push")
    elif event == ProgressEvent.NPM_SCRIPT:
        info(f"{SUCCESS} Npm run {detail}")


def _optional_value(value: str | None, disabled: bool) -> bool | str | None:
    # "" is what a value-less --commit/--tag/--publish-tag yields
    if disabled:
        return False
    if value is None:
        return None
    return value or True


@click.command(cls=BumpCommand)
@click.version_option(package_name="bumpkit")
@click.argument("args", nargs=-1)
@click.option("--preid", help="ID for prerelease versions (default: beta).")
@click.option("--all", "all_files", is_flag=True, help="Commit all changed files, not just the bumped ones.")
@click.option("--no-git-check", is_flag=True, help="Skip the clean working tree check.")
@click.option("-c", "--commit", is_flag=False, flag_value="", default=None, metavar="[MSG]", help="Commit message template.")
@click.option("--no-commit", is_flag=True, help="Skip the commit.")
@click.option("-t", "--tag", is_flag=False, flag_value="", default=None, metavar="[NAME]", help="Tag name template.")
@click.option("--no-tag", is_flag=True, help="Skip the tag.")
@click.option("--sign", is_flag=True, help="Sign the commit and tag.")
@click.option("-p", "--push/--no-push", default=None, help="Push to the remote.")
@click.option("--install", is_flag=True, help="Run 'npm install' after bumping.")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation.")
@click.option("-r", "--recursive", is_flag=True, help="Bump workspace manifests recursively.")
@click.option("--no-verify", is_flag=True, help="Skip git commit hooks.")
@click.option("--ignore-scripts", is_flag=True, help="Do not run npm lifecycle scripts or the execute hook.")
@click.option("-q", "--quiet", is_flag=True, help="Quiet mode.")
@click.option("--verbose", is_flag=True, help="Log debug details.")
@click.option("--current-version", help="Use this as the current version.")
@click.option("--print-commits/--no-print-commits", default=None, help="Print the commits since the last release.")
@click.option("-x", "--execute", metavar="CMD", help="Command to run after the files are bumped.")
@click.option("--publish-tag", is_flag=False, flag_value="", default=None, metavar="[TAG]", help="npm dist-tag to write into publishConfig.tag.")
@click.pass_context
def cli(
    ctx: click.Context,
    args: tuple[str, ...],
    preid: str | None,
    all_files: bool,
    no_git_check: bool,
    commit: str | None,
    no_commit: bool,
    tag: str | None,
    no_tag: bool,
    sign: bool,
    push: bool | None,
    install: bool,
    yes: bool,
    recursive: bool,
    no_verify: bool,
    ignore_scripts: bool,
    quiet: bool,
    verbose: bool,
    current_version: str | None,
    print_commits: bool | None,
    execute: str | None,
    publish_tag: str | None,
) -> None:
    """Bump the version of package.json, Cargo.toml, jsr.json and friends.

    RELEASE is a version number, a release kind (major, minor, patch,
    premajor, preminor, prepatch, prerelease, next, conventional) or
    "prompt". The remaining arguments are file patterns to bump.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    set_quiet(quiet)

    release, files = split_release(args)
    if recursive and files:
        warn("The --recursive option is ignored when files are specified")
        recursive = False

    overrides: dict[str, Any] = {
        "release": release,
        "preid": preid,
        "commit": _optional_value(commit, no_commit),
        "tag": _optional_value(tag, no_tag),
        "push": push,
        "current_version": current_version,
        "execute": execute,
        "print_commits": print_commits,
        "publish_tag": _optional_value(publish_tag, False),
        "files": files or None,
    }
    # Flags only override the config file when given
    for name, value in (
        ("all", all_files),
        ("no_git_check", no_git_check),
        ("sign", sign),
        ("install", install),
        ("recursive", recursive),
        ("no_verify", no_verify),
        ("ignore_scripts", ignore_scripts),
    ):
        if value:
            overrides[name] = True
    if yes:
        overrides["confirm"] = False

    try:
        options = load_bump_config(overrides, Path.cwd())
        version_bump(options, progress=print_progress)
    except BumpkitError as exc:
        error(str(exc))
        ctx.exit(exc.exit_code)
    except (OSError, JsonEditError, TOMLKitError) as exc:
        error(str(exc))
        ctx.exit(ExitCode.FATAL_ERROR)
