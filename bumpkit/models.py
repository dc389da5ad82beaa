"""Data models for bumpkit.

These Pydantic models represent the core data structures passed between the
pipeline stages: the requested release, parsed git commits and the location
a current version was read from.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

BumpKind = Literal[
    "major",
    "minor",
    "patch",
    "premajor",
    "preminor",
    "prepatch",
    "prerelease",
    "next",
    "conventional",
]

DEFAULT_PREID = "beta"


class VersionRelease(BaseModel):
    """An explicit target version, e.g. ``bumpkit 2.0.0``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["version"] = "version"
    version: str


class PromptRelease(BaseModel):
    """The user picks the new version interactively."""

    model_config = ConfigDict(frozen=True)

    type: Literal["prompt"] = "prompt"
    preid: str = DEFAULT_PREID


class BumpRelease(BaseModel):
    """A bump relative to the current version, e.g. ``bumpkit minor``."""

    model_config = ConfigDict(frozen=True)

    type: BumpKind
    preid: str = DEFAULT_PREID


Release = Annotated[
    Union[VersionRelease, PromptRelease, BumpRelease],
    Field(discriminator="type"),
]


class GitAuthor(BaseModel):
    """Commit author or co-author."""

    name: str
    email: str | None = None


class Reference(BaseModel):
    """A reference extracted from a commit: its hash, an issue or a pull request."""

    type: Literal["hash", "issue", "pull-request"]
    value: str


class GitCommit(BaseModel):
    """A commit parsed from ``git log`` output.

    Attributes:
        short_hash: Abbreviated commit hash.
        message: Subject line as written.
        body: Remaining lines of the commit message, stripped.
        description: Subject text after the conventional prefix, with
                     pull-request references removed.
        type: Conventional commit type ("feat", "fix", ...), empty when the
              subject is not a conventional commit.
        scope: Conventional commit scope, empty when absent.
        is_breaking: "!" marker or a "BREAKING CHANGE:" line in the body.
        references: Pull requests, issues, then the commit hash.
        authors: Primary author first, then co-authors in body order.
    """

    short_hash: str
    message: str
    body: str = ""
    description: str = ""
    type: str = ""
    scope: str = ""
    is_breaking: bool = False
    references: list[Reference] = Field(default_factory=list)
    authors: list[GitAuthor] = Field(default_factory=list)


class VersionSource(BaseModel):
    """Where a current version was found.

    Attributes:
        source: Path of the manifest the version was read from.
        version: The version string found there.
    """

    source: str
    version: str
