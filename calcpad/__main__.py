"""CLI for the calcpad keypad calculator.

Usage:
    python -m calcpad eval "(3+4)x2"                   # Stream grammar (default)
    python -m calcpad eval "3 + 4 * 2" -g spaced       # Spaced grammar
    python -m calcpad eval "5 / 0" -g spaced --division-by-zero raise
    python -m calcpad keys 1 2 + 3 =                   # Replay keypad presses
    python -m calcpad keys 7 x 6 = M --history         # ...and show the history
    python -m calcpad repl                             # Interactive session
    python -m calcpad grammars                         # Show grammars and defaults
"""

from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from calcpad.config import load_config, log_level, parse_grammar, parse_policy
from calcpad.errors import ConfigError
from calcpad.evaluator import Evaluator
from calcpad.history import History, render_history
from calcpad.keypad import KeypadSession
from calcpad.models import ALL_GRAMMARS, GRAMMAR_INFO, EvaluatorConfig

app = typer.Typer(
    name="calcpad",
    help="Keypad calculator expression evaluator",
    no_args_is_help=True,
)
console = Console(stderr=True)


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _resolve_config(
    grammar: Optional[str],
    division_by_zero: Optional[str] = None,
    strict: Optional[bool] = None,
) -> EvaluatorConfig:
    """Environment config, with CLI options layered on top."""
    try:
        config = load_config(grammar=parse_grammar(grammar) if grammar else None)
        return config.with_overrides(
            division_by_zero=parse_policy(division_by_zero) if division_by_zero else None,
            strict=strict,
        )
    except ConfigError as e:
        _fail(str(e))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log evaluation details to stderr"),
) -> None:
    """Keypad calculator expression evaluator."""
    try:
        level = logging.DEBUG if verbose else log_level()
    except ConfigError as e:
        _fail(str(e))
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=False)],
        force=True,
    )


@app.command("eval")
def cmd_eval(
    expression: str = typer.Argument(help="Expression, e.g. '(3+4)x2' or '3 + 4 * 2'"),
    grammar: Optional[str] = typer.Option(None, "--grammar", "-g", help="Grammar: spaced, stream"),
    division_by_zero: Optional[str] = typer.Option(
        None, "--division-by-zero", help="Division by zero: zero, raise"
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--lenient", help="Report or skip malformed pieces of the expression"
    ),
) -> None:
    """Evaluate a single expression and print the result."""
    config = _resolve_config(grammar, division_by_zero, strict)
    result = Evaluator(config).evaluate(expression)
    if not result.ok:
        _fail(f"Error: {result.error}")
    typer.echo(result.text)


@app.command("keys")
def cmd_keys(
    keys: List[str] = typer.Argument(help="Key labels: 0-9 . + - x * / % ( ) C DEL +/- = M"),
    grammar: Optional[str] = typer.Option(None, "--grammar", "-g", help="Keypad: spaced, stream"),
    show_history: bool = typer.Option(False, "--history", help="Show the history table afterwards"),
) -> None:
    """Replay keypad presses and print the final display."""
    config = _resolve_config(grammar)
    session = KeypadSession(config.grammar, evaluator=Evaluator(config))
    try:
        session.press_all(keys)
    except ValueError as e:
        _fail(str(e))

    typer.echo(session.display)
    if session.dialog is not None:
        console.print(f"[bold]Memory[/bold]\n{escape(session.dialog.rstrip())}")
    if show_history:
        render_history(session.history, console)


@app.command("repl")
def cmd_repl(
    grammar: Optional[str] = typer.Option(None, "--grammar", "-g", help="Grammar: spaced, stream"),
) -> None:
    """Evaluate expressions line by line. Commands: history, clear, quit."""
    config = _resolve_config(grammar)
    evaluator = Evaluator(config)
    history = History()
    console.print(f"[dim]calcpad ({config.grammar.value}). Commands: history, clear, quit[/dim]")

    while True:
        try:
            line = console.input("[bold]>[/bold] ")
        except (EOFError, KeyboardInterrupt):
            break

        line = line.strip()
        if not line:
            continue
        if line in ("quit", "exit"):
            break
        if line == "history":
            render_history(history, console)
            continue
        if line == "clear":
            history.clear()
            console.print("[dim]History cleared[/dim]")
            continue

        result = evaluator.evaluate(line)
        history.add(line, result.text)
        if result.ok:
            typer.echo(result.text)
        else:
            console.print(f"[red]Error[/red]: {escape(str(result.error))}")


@app.command("grammars")
def cmd_grammars() -> None:
    """Show the accepted grammars and their default policies."""
    table = Table(title="Grammars", show_header=True, header_style="bold")
    table.add_column("Name", style="green", min_width=8)
    table.add_column("Description", min_width=30)
    table.add_column("Operators")
    table.add_column("Parens", justify="center")
    table.add_column("Div by zero", justify="right")
    table.add_column("Strict", justify="right")

    for grammar in ALL_GRAMMARS:
        info = GRAMMAR_INFO[grammar]
        defaults = info.defaults
        table.add_row(
            grammar.value,
            info.description,
            " ".join(info.operators),
            "yes" if info.parentheses else "no",
            defaults.division_by_zero.value,
            "yes" if defaults.strict else "no",
        )

    console.print()
    console.print(table)
    console.print()


if __name__ == "__main__":
    app()
