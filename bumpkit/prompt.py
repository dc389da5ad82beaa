"""Interactive prompts.

The pipeline talks to a Prompter so tests (and non-terminal front ends) can
answer questions without a TTY. ClickPrompter is the terminal implementation.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

import click

from .errors import UserAbort


class Prompter(Protocol):
    def choose(self, message: str, choices: Sequence[tuple[str, str]], default: str) -> str:
        """Return the value of the chosen (value, label) pair."""

    def text(
        self,
        message: str,
        default: str | None = None,
        validate: Callable[[str], str | None] | None = None,
    ) -> str:
        """Return the entered text; validate returns an error message or None."""

    def confirm(self, message: str, default: bool = True) -> bool:
        """Return the yes/no answer."""


class ClickPrompter:
    """Prompter rendering questions on the terminal with click."""

    def choose(self, message: str, choices: Sequence[tuple[str, str]], default: str) -> str:
        values = [value for value, _ in choices]
        click.echo(click.style("? ", fg="cyan") + click.style(message, bold=True))
        for index, (value, label) in enumerate(choices, start=1):
            marker = click.style("❯", fg="cyan") if value == default else " "
            click.echo(f"{marker} {index:>2}) {label}")

        def convert(answer: str) -> str:
            answer = answer.strip()
            if answer.isdigit() and 1 <= int(answer) <= len(values):
                return values[int(answer) - 1]
            if answer in values:
                return answer
            raise click.BadParameter(f"choose a number between 1 and {len(values)} or one of {', '.join(values)}")

        try:
            return click.prompt("Select", default=default, value_proc=convert)
        except click.Abort as exc:
            raise UserAbort("Aborted") from exc

    def text(
        self,
        message: str,
        default: str | None = None,
        validate: Callable[[str], str | None] | None = None,
    ) -> str:
        def convert(answer: str) -> str:
            problem = validate(answer) if validate and answer.strip() else None
            if problem:
                raise click.BadParameter(problem)
            return answer

        try:
            return click.prompt(message, default=default or "", show_default=bool(default), value_proc=convert)
        except click.Abort as exc:
            raise UserAbort("Aborted") from exc

    def confirm(self, message: str, default: bool = True) -> bool:
        try:
            return click.confirm(message, default=default)
        except click.Abort as exc:
            raise UserAbort("Aborted") from exc
