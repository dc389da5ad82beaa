"""Conventional commit parsing.

Parses the output of ``git log --pretty=----%n%s|%h|%an|%ae%n%b`` into
GitCommit records and infers the semantic version impact of a set of commits.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

import click

from .models import GitAuthor, GitCommit, Reference

COMMIT_MARKER = "----"

_MARKER_RE = re.compile(rf"^{COMMIT_MARKER}[ \t]*(?:\r?\n|\Z)", re.MULTILINE)

CONVENTIONAL_COMMIT_RE = re.compile(
    r"^(?P<emoji>:\S+?:|[\U0001F300-\U0001FAFF]|[☀-⭕])?\s*"
    r"(?P<type>[a-z]+)"
    r"(?:\((?P<scope>.+?)\))?"
    r"(?P<breaking>!)?"
    r": (?P<description>.+)"
)
BREAKING_CHANGE_RE = re.compile(r"breaking change:", re.IGNORECASE)
CO_AUTHORED_BY_RE = re.compile(
    r"co-authored-by:\s*(?P<name>.+)(?:<(?P<email>.+)>)", re.IGNORECASE
)
PULL_REQUEST_RE = re.compile(r"\([ a-z]*(#\d+)\s*\)")
ISSUE_RE = re.compile(r"(#\d+)")

TYPE_COLORS = {
    "feat": "green",
    "fix": "yellow",
    "refactor": "cyan",
    "perf": "magenta",
    "docs": "blue",
    "test": "blue",
    "chore": "bright_black",
    "ci": "bright_black",
    "build": "bright_black",
}


def parse_commits(raw: str) -> list[GitCommit]:
    """Parse a block of git log text into commits, preserving input order.

    Text before the first marker line is discarded. The first line of each
    block is "subject|hash|author name|author email"; the rest is the body.
    """
    blocks = _MARKER_RE.split(raw)[1:]
    return [parse_git_commit(block) for block in blocks if block.strip()]


def parse_git_commit(block: str) -> GitCommit:
    """Parse a single commit block (header line plus body)."""
    header, _, body = block.partition("\n")
    fields = header.rstrip("\r").split("|")
    message = fields[0]
    short_hash = fields[1] if len(fields) > 1 else ""
    author = GitAuthor(
        name=fields[2] if len(fields) > 2 else "",
        email=fields[3] if len(fields) > 3 and fields[3] else None,
    )
    body = body.strip()

    match = CONVENTIONAL_COMMIT_RE.match(message)
    commit_type = match.group("type") if match else ""
    scope = (match.group("scope") or "") if match else ""
    description = match.group("description") if match else message
    is_breaking = bool(match and match.group("breaking")) or bool(
        BREAKING_CHANGE_RE.search(body)
    )

    references: list[Reference] = [
        Reference(type="pull-request", value=m.group(1))
        for m in PULL_REQUEST_RE.finditer(description)
    ]
    for m in ISSUE_RE.finditer(description):
        if not any(ref.value == m.group(1) for ref in references):
            references.append(Reference(type="issue", value=m.group(1)))
    references.append(Reference(type="hash", value=short_hash))

    description = PULL_REQUEST_RE.sub("", description).strip()

    authors = [author]
    for m in CO_AUTHORED_BY_RE.finditer(body):
        authors.append(
            GitAuthor(name=m.group("name").strip(), email=(m.group("email") or "").strip())
        )

    return GitCommit(
        short_hash=short_hash,
        message=message,
        body=body,
        description=description,
        type=commit_type,
        scope=scope,
        is_breaking=is_breaking,
        references=references,
        authors=authors,
    )


def determine_semver_change(commits: Iterable[GitCommit]) -> str:
    """Infer the release kind a set of commits calls for.

    Returns:
        "major" if any commit is breaking, "minor" if any is a feat,
        "patch" otherwise (including for an empty set).
    """
    has_feat = False
    for commit in commits:
        if commit.is_breaking:
            return "major"
        if commit.type == "feat":
            has_feat = True
    return "minor" if has_feat else "patch"


def format_commits(commits: Sequence[GitCommit]) -> list[str]:
    """Render commits as aligned, coloured one-line summaries."""
    if not commits:
        return []
    type_width = max(len(c.type) + (1 if c.is_breaking else 0) for c in commits)
    scope_width = max(len(c.scope) for c in commits)

    lines: list[str] = []
    for commit in commits:
        label = commit.type + ("!" if commit.is_breaking else "")
        color = "red" if commit.is_breaking else TYPE_COLORS.get(commit.type, "white")
        parts = [
            click.style(commit.short_hash, dim=True),
            click.style(label.rjust(type_width), fg=color, bold=commit.is_breaking),
        ]
        if scope_width:
            parts.append(click.style(commit.scope.ljust(scope_width), dim=True))
        parts.append(commit.description)
        lines.append(" ".join(parts))
    return lines
