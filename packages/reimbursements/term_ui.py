"""Terminal prompts (prompt_toolkit) and console rendering (rich).

The triage loop depends only on the :class:`Prompter` protocol, so tests can
substitute a scripted implementation. :class:`PromptToolkitPrompter` is the
interactive implementation used by the CLI; it accepts an optional
``PromptSession`` whose input/output are reused (pipe input in tests).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import ValidationError, Validator
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import Transaction

_YES = {"y", "yes"}
_NO = {"n", "no"}


class Prompter(Protocol):
    """Synchronous operator questions used by the triage loop."""

    def confirm(self, message: str, *, default: bool = False) -> bool: ...

    def text(self, message: str) -> str: ...

    def select(self, message: str, choices: Sequence[str], *, default: str) -> str: ...


class _YesNoValidator(Validator):
    def validate(self, document) -> None:
        if document.text.strip().lower() not in _YES | _NO | {""}:
            raise ValidationError(message="Answer y or n.")


class _ChoiceValidator(Validator):
    def __init__(self, allowed_lower: set[str]) -> None:
        self._allowed_lower = allowed_lower

    def validate(self, document) -> None:
        if document.text.strip().lower() not in self._allowed_lower:
            raise ValidationError(message="Select an option from the list.")


class PromptToolkitPrompter:
    """Interactive :class:`Prompter` backed by prompt_toolkit."""

    def __init__(self, session: PromptSession | None = None) -> None:
        self._base = session

    def _session(self) -> PromptSession:
        if self._base is None:
            return PromptSession()
        return PromptSession(
            input=getattr(self._base, "input", None),
            output=getattr(self._base, "output", None),
        )

    def confirm(self, message: str, *, default: bool = False) -> bool:
        hint = "(Y/n)" if default else "(y/N)"
        answer = self._session().prompt(
            f"{message} {hint} ",
            validator=_YesNoValidator(),
            validate_while_typing=False,
        )
        value = answer.strip().lower()
        if not value:
            return default
        return value in _YES

    def text(self, message: str) -> str:
        return self._session().prompt(f"{message} ").strip()

    def select(self, message: str, choices: Sequence[str], *, default: str) -> str:
        """Pick one of ``choices``; the default is pre-filled, Tab opens the menu."""
        words = list(choices)
        canonical = {w.lower(): w for w in words}
        completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)
        value = self._session().prompt(
            f"{message} ",
            default=default,
            completer=completer,
            complete_while_typing=False,
            validator=_ChoiceValidator(set(canonical)),
            validate_while_typing=False,
        )
        return canonical[value.strip().lower()]


# ----------------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------------


def _fmt_cost(cost: float) -> str:
    return f"{cost:,.2f}"


def _entries_table(title: str, entries: Sequence[Transaction], *, style: str) -> Table:
    table = Table(title=title, title_style=style, title_justify="left", show_edge=False)
    table.add_column("Date")
    table.add_column("Name")
    table.add_column("Cost", justify="right")
    table.add_column("Currency")
    table.add_column("ID")
    for tx in entries:
        cells = (tx.date, tx.name, _fmt_cost(tx.cost), tx.currency, tx.id)
        table.add_row(*(Text(v) for v in cells))
    return table


def render_remaining(console: Console, remaining: int) -> None:
    console.print(Text(f"{remaining} candidates remaining", style="bright_black"))


def render_entry(console: Console, current: Transaction, cluster: Sequence[Transaction]) -> None:
    """Show the cluster (if any) followed by the entry under review."""
    if cluster:
        console.print(_entries_table(f"Similar entries ({len(cluster)})", cluster, style="cyan"))
    else:
        console.print(Text("No similar entries.", style="cyan"))
    console.print(_entries_table("This entry", [current], style="bright_red"))


def render_separator(console: Console) -> None:
    console.print()
    console.rule(style="bright_yellow")
    console.print()


def render_done(console: Console) -> None:
    console.print(Text("Done!", style="bright_green"))


__all__ = [
    "Prompter",
    "PromptToolkitPrompter",
    "render_remaining",
    "render_entry",
    "render_separator",
    "render_done",
]
