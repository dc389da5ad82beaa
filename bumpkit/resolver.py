"""New version resolution.

Turns the requested Release into a concrete new version: an explicit version
is validated, a bump kind is applied to the current version, and a prompt
release asks the user to pick among the candidates.
"""

from __future__ import annotations

import logging

import click
import semver

from .commits import format_commits
from .errors import GitError, InvalidArgumentError, InvalidVersionError, UserAbort
from .git import get_recent_commits
from .models import BumpRelease, GitCommit, PromptRelease, VersionRelease
from .operation import Operation
from .prompt import ClickPrompter, Prompter
from .shell import warn
from .versions import (
    CONVENTIONAL_TYPE,
    clean_version,
    get_next_versions,
    increment,
    is_valid_version,
    parse_version,
    resolve_kind,
)

LOG = logging.getLogger(__name__)

PADDING = 13

# Choice order of the interactive prompt
PROMPT_KINDS = ("major", "minor", "patch", "next", "conventional")
PROMPT_PRE_KINDS = (("prepatch", "pre-patch"), ("preminor", "pre-minor"), ("premajor", "pre-major"))
AS_IS = "none"
CUSTOM = "custom"
CONFIG = "config"


def get_new_version(operation: Operation, prompter: Prompter | None = None) -> Operation:
    """Determine the new version and record it on the operation.

    Raises:
        InvalidVersionError: If an explicit or custom version is not valid semver.
        UserAbort: If the user cancels the prompt or enters nothing.
    """
    release = operation.options.release
    current = operation.state.current_version

    if isinstance(release, VersionRelease):
        new_version = clean_version(release.version)
        if new_version is None:
            raise InvalidVersionError(f"{release.version} is not a valid version number")
        return operation.update(new_version=new_version)

    if isinstance(release, BumpRelease):
        commits = None
        if release.type == CONVENTIONAL_TYPE and not parse_version(current).prerelease:
            commits = get_recent_commits(operation)
        kind = resolve_kind(current, release.type, commits)
        return operation.update(
            release=kind,
            new_version=increment(current, kind, release.preid),
        )

    if isinstance(release, PromptRelease):
        return prompt_for_new_version(operation, prompter or ClickPrompter())
    raise InvalidArgumentError(f"Unsupported release: {release!r}")


def _recent_commits_for_prompt(operation: Operation) -> list[GitCommit]:
    try:
        return get_recent_commits(operation)
    except GitError as exc:
        LOG.debug("Could not read the git history: %s", exc)
        warn("Could not read the git history, conventional bump assumes no changes")
        return []


def print_commits(commits: list[GitCommit]) -> None:
    """Print the commits a release would contain, above the prompt."""
    if not commits:
        return
    click.echo(click.style(f"{len(commits)} commits since the last release:", bold=True))
    for line in format_commits(commits):
        click.echo(f"  {line}")
    click.echo()


def build_choices(
    current: str,
    next_versions: dict[str, str],
    custom: str | None,
) -> list[tuple[str, str]]:
    """Return the (value, label) pairs of the version prompt, in display order."""
    choices = [(kind, f"{kind:>{PADDING}} {next_versions[kind]}") for kind in PROMPT_KINDS]
    if custom:
        choices.append((CONFIG, f"{'from config':>{PADDING}} {custom}"))
    choices += [(kind, f"{label:>{PADDING}} {next_versions[kind]}") for kind, label in PROMPT_PRE_KINDS]
    choices.append((AS_IS, f"{'as-is':>{PADDING}} {current}"))
    choices.append((CUSTOM, f"{'custom':>{PADDING}} ..."))
    return choices


def _validate_custom(answer: str) -> str | None:
    return None if is_valid_version(answer) else "That's not a valid version number"


def prompt_for_new_version(operation: Operation, prompter: Prompter) -> Operation:
    """Ask the user for the new version."""
    options = operation.options
    current = operation.state.current_version
    release = options.release

    commits = _recent_commits_for_prompt(operation)
    next_versions = get_next_versions(current, release.preid, commits)
    custom = options.custom_version(current, semver) if options.custom_version else None

    if options.print_commits:
        print_commits(commits)

    answer = prompter.choose(
        f"Current version {current}",
        build_choices(current, next_versions, custom),
        default=CONFIG if custom else "next",
    )

    if answer == AS_IS:
        return operation.update(new_version=current)

    if answer == CUSTOM:
        text = prompter.text("Enter the new version number:", default=current, validate=_validate_custom)
        if not text.strip():
            raise UserAbort("No version entered, aborting")
        new_version = clean_version(text)
    elif answer == CONFIG:
        new_version = clean_version(custom)
    else:
        new_version = clean_version(next_versions[answer])

    if new_version is None:
        raise InvalidVersionError(f"{answer} did not produce a valid version number")

    if answer in ("major", "minor", "patch", "prepatch", "preminor", "premajor"):
        return operation.update(release=answer, new_version=new_version)
    return operation.update(new_version=new_version)
