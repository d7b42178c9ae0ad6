"""In-memory calculation history.

Nothing is written to disk; a History lives as long as the session that
owns it. render_history() shows it as a Rich table.
"""

from __future__ import annotations

from typing import Iterator

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from calcpad.models import ERROR_TEXT, HistoryEntry

EMPTY_MESSAGE = "No history available."


class History:
    """Ordered record of ``expression = result`` entries."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def add(self, expression: str, result: str) -> HistoryEntry:
        entry = HistoryEntry(expression=expression, result=result)
        self._entries.append(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def as_text(self) -> str:
        """One entry per line, or the empty-history message."""
        if not self._entries:
            return EMPTY_MESSAGE
        return "".join(f"{entry}\n" for entry in self._entries)


def render_history(history: History, console: Console, title: str = "Memory") -> None:
    """Render a Rich table of the history entries."""
    if not len(history):
        console.print(f"[yellow]{EMPTY_MESSAGE}[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Expression", min_width=16)
    table.add_column("Result", justify="right", min_width=10)

    for i, entry in enumerate(history, 1):
        result = entry.result
        if result == ERROR_TEXT:
            result = f"[red]{result}[/red]"
        else:
            result = f"[green]{result}[/green]"
        table.add_row(str(i), escape(entry.expression), result)

    console.print()
    console.print(table)
    console.print()
