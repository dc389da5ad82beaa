"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from bumpkit.operation import Operation

CARGO_WORKSPACE = """\
[workspace]
members = ["crates/*"]

[workspace.package]
version = "1.0.0"
edition = "2021"

[workspace.dependencies]
serde = "1.0"
core-lib = { path = "crates/core", version = "1.0.0" }
local-only = { path = "crates/local" }
"""


@pytest.fixture
def sample_cargo_doc() -> tomlkit.TOMLDocument:
    """Create a sample Cargo workspace manifest."""
    return tomlkit.parse(CARGO_WORKSPACE)


@pytest.fixture
def project(tmp_path: Path):
    """Return a helper writing files relative to tmp_path."""

    def write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return write


class FakePrompter:
    """Prompter answering from canned values and recording the questions."""

    def __init__(self, choice: str = "next", text: str = "", confirm: bool = True) -> None:
        self.choice = choice
        self.answer = text
        self.confirmed = confirm
        self.choices: list[tuple[str, str]] = []
        self.default: str | None = None
        self.text_default: str | None = None

    def choose(self, message, choices, default):
        self.choices = list(choices)
        self.default = default
        return self.choice

    def text(self, message, default=None, validate=None):
        self.text_default = default
        return self.answer

    def confirm(self, message, default=True):
        return self.confirmed


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


def start(tmp_path: Path, **options) -> Operation:
    """Start an operation rooted at tmp_path."""
    options.setdefault("cwd", str(tmp_path))
    return Operation.start(options)
