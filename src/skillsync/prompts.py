"""Interactive confirmation and selection callbacks.

The core only sees two callables:

- ``Confirm``: ``(prompt) -> bool``; a decline returns ``False``.
- ``Select``: ``(message, choices) -> list[str]`` of chosen values.

Both raise ``OperationCancelled`` when the user interrupts the prompt, which
is distinct from a decline.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from rich.console import Console
from rich.prompt import Confirm as RichConfirm
from rich.prompt import Prompt
from rich.table import Table

from skillsync.errors.exceptions import OperationCancelled

Confirm = Callable[[str], bool]


@dataclass(frozen=True)
class Choice:
    """One selectable item.

    Attributes:
        value: Value returned when chosen.
        label: Display label.
        description: Short description.
        detail: Extra column such as a size, shown between label and description.
        checked: Selected when the user accepts the default.
    """

    value: str
    label: str
    description: str = ""
    detail: str = ""
    checked: bool = True


Select = Callable[[str, Sequence[Choice]], list[str]]


def accept_all(prompt: str) -> bool:
    """Confirmation callback that always accepts."""
    return True


def console_confirm(console: Console | None = None) -> Confirm:
    """Build a yes/no callback backed by ``rich.prompt.Confirm``."""

    def _confirm(prompt: str) -> bool:
        try:
            return RichConfirm.ask(f"[yellow]{prompt}[/yellow]", default=False, console=console)
        except (KeyboardInterrupt, EOFError) as exc:
            raise OperationCancelled() from exc

    return _confirm


def parse_selection(answer: str, choices: Sequence[Choice]) -> list[str]:
    """Turn a selection answer into chosen values.

    Accepts ``all``, ``none``, an empty answer (the checked defaults), or
    comma/space separated 1-based indexes.

    Raises:
        ValueError: If an index is not a number or out of range.
    """
    text = answer.strip().lower()
    if not text:
        return [c.value for c in choices if c.checked]
    if text == "all":
        return [c.value for c in choices]
    if text == "none":
        return []

    picked: list[str] = []
    for token in text.replace(",", " ").split():
        index = int(token)
        if not 1 <= index <= len(choices):
            raise ValueError(f"Selection {index} out of range")
        value = choices[index - 1].value
        if value not in picked:
            picked.append(value)
    return picked


def console_select(console: Console | None = None) -> Select:
    """Build a multi-select callback that lists numbered choices."""
    out = console or Console()

    def _select(message: str, choices: Sequence[Choice]) -> list[str]:
        table = Table(show_header=False, box=None)
        for index, choice in enumerate(choices, start=1):
            mark = "[green]*[/green]" if choice.checked else ""
            table.add_row(
                f"{index:>3}",
                mark,
                f"[bold]{choice.label}[/bold]",
                f"[dim]{choice.detail}[/dim]",
                f"[dim]{choice.description[:70]}[/dim]",
            )
        out.print(table)

        while True:
            try:
                answer = Prompt.ask(
                    f"{message} (numbers, 'all', 'none'; Enter for checked)",
                    default="",
                    show_default=False,
                    console=out,
                )
            except (KeyboardInterrupt, EOFError) as exc:
                raise OperationCancelled() from exc
            try:
                return parse_selection(answer, choices)
            except ValueError as exc:
                out.print(f"[red]{exc}[/red]")

    return _select


def console_choose(console: Console | None = None) -> Callable[[str, Sequence[Choice]], str]:
    """Build a single-choice callback (used to pick a remote)."""
    out = console or Console()

    def _choose(message: str, choices: Sequence[Choice]) -> str:
        for index, choice in enumerate(choices, start=1):
            out.print(f"{index:>3}  [bold]{choice.label}[/bold]  [dim]{choice.description}[/dim]")
        try:
            answer = Prompt.ask(
                message,
                choices=[str(i) for i in range(1, len(choices) + 1)],
                console=out,
            )
        except (KeyboardInterrupt, EOFError) as exc:
            raise OperationCancelled() from exc
        return choices[int(answer) - 1].value

    return _choose
