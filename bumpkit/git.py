"""Git data and release commands.

Reads the commits since the last release tag and performs the commit, tag
and push steps once the manifests have been updated.
"""

from __future__ import annotations

from .commits import COMMIT_MARKER, parse_commits
from .errors import GitError
from .models import GitCommit
from .operation import Operation, ProgressEvent
from .options import DEFAULT_TAG_NAME
from .shell import git

LOG_FORMAT = f"{COMMIT_MARKER}%n%s|%h|%an|%ae%n%b"


def format_version_string(template: str, new_version: str) -> str:
    """Fill a version template.

    Every "%s" is replaced with the version; a template without "%s" gets the
    version appended ("release v" → "release v1.2.3").
    """
    if "%s" in template:
        return template.replace("%s", new_version)
    return template + new_version


def tag_pattern(template: str) -> str:
    """Glob matching every tag produced by a tag name template ("v" → "v*")."""
    return format_version_string(template, "*")


def get_last_tag(template: str = DEFAULT_TAG_NAME, cwd: str | None = None) -> str | None:
    """Return the most recent tag reachable from HEAD matching template, if any."""
    tag = git("describe", "--tags", "--abbrev=0", "--match", tag_pattern(template), cwd=cwd, check=False)
    return tag or None


def get_first_commit(cwd: str | None = None) -> str:
    """Return the hash of the repository's root commit."""
    roots = git("rev-list", "--max-parents=0", "HEAD", cwd=cwd)
    if not roots:
        raise GitError("Could not determine the first commit of the repository")
    return roots.splitlines()[0]


def get_git_log(since: str, cwd: str | None = None) -> str:
    """Return raw log text for the commits in since..HEAD, most recent first."""
    return git("--no-pager", "log", f"{since}..HEAD", f"--pretty={LOG_FORMAT}", cwd=cwd)


def get_recent_commits(operation: Operation) -> list[GitCommit]:
    """Parse the commits since the last release tag (or the first commit)."""
    cwd = operation.options.cwd
    template = operation.options.tag.name if operation.options.tag else DEFAULT_TAG_NAME
    since = get_last_tag(template, cwd) or get_first_commit(cwd)
    return parse_commits(get_git_log(since, cwd))


def check_git_status(cwd: str | None = None) -> None:
    """Ensure the working tree is clean.

    Raises:
        GitError: If there are uncommitted changes.
    """
    status = git("status", "--porcelain", cwd=cwd)
    if status:
        raise GitError(
            "Git working tree is not clean:\n"
            + status
            + "\nCommit or stash your changes, or use --all / --no-git-check."
        )


def git_commit(operation: Operation) -> Operation:
    """Commit the updated files, if committing is enabled."""
    commit = operation.options.commit
    if commit is None:
        return operation

    args = ["--allow-empty"]
    if commit.all:
        # Commit ALL files, not just the ones that were bumped
        args.append("--all")
    if commit.no_verify:
        args.append("--no-verify")
    if operation.options.sign:
        args.append("--gpg-sign")

    commit_message = format_version_string(commit.message, operation.state.new_version)
    args += ["--message", commit_message]

    if not commit.all:
        args += list(operation.state.updated_files)

    git("commit", *args, cwd=operation.options.cwd)
    return operation.update(event=ProgressEvent.GIT_COMMIT, commit_message=commit_message)


def git_tag(operation: Operation) -> Operation:
    """Create an annotated tag for the release, if tagging is enabled."""
    tag = operation.options.tag
    if tag is None:
        return operation

    new_version = operation.state.new_version
    message_template = (
        operation.options.commit.message if operation.options.commit else DEFAULT_TAG_NAME
    )
    tag_name = format_version_string(tag.name, new_version)
    args = ["--annotate", "--message", format_version_string(message_template, new_version), tag_name]
    if operation.options.sign:
        args.append("--sign")

    git("tag", *args, cwd=operation.options.cwd)
    return operation.update(event=ProgressEvent.GIT_TAG, tag_name=tag_name)


def git_push(operation: Operation) -> Operation:
    """Push the commit, and the tags when tagging, if pushing is enabled."""
    if not operation.options.push:
        return operation

    git("push", cwd=operation.options.cwd)
    if operation.options.tag:
        git("push", "--tags", cwd=operation.options.cwd)
    return operation.update(event=ProgressEvent.GIT_PUSH)
