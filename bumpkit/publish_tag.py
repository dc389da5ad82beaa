"""npm dist-tag resolution for publishConfig.tag."""

from __future__ import annotations

from .manifest import LATEST_TAG
from .operation import Operation
from .prompt import ClickPrompter, Prompter
from .versions import parse_version


def default_publish_tag(new_version: str) -> str:
    """First prerelease identifier of new_version, or "latest" for a stable one."""
    prerelease = parse_version(new_version).prerelease
    return prerelease.split(".")[0] if prerelease else LATEST_TAG


def resolve_publish_tag(operation: Operation, prompter: Prompter | None = None) -> Operation:
    """Record the publish tag to write into package.json, if one was requested."""
    requested = operation.options.publish_tag
    if not requested:
        return operation
    if isinstance(requested, str):
        return operation.update(publish_tag=requested)

    default = default_publish_tag(operation.state.new_version)
    if not operation.options.interface:
        return operation.update(publish_tag=default)

    prompter = prompter or ClickPrompter()
    tag = prompter.text("Publish tag", default=default)
    if tag.strip():
        return operation.update(publish_tag=tag.strip())
    return operation
