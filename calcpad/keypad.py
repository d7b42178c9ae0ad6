"""Keypad input assembly: button presses to expression buffer.

The evaluator only sees finished expression strings. Everything the keypad
has to remember between presses (the buffer, whether a new number is
starting, whether the current number already has a decimal point, whether
the last press was an operator) lives in KeypadSession.

Spaced keypad (Grammar A):
    digits, '.', + - * /, C, =
    Operators are written as " + " so the buffer stays space-delimited.

Stream keypad (Grammar B):
    digits, '.', ( ), + - x / %, C, DEL, +/-, =, M
    Successful results are appended to the history; M shows it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from calcpad.evaluator import Evaluator
from calcpad.history import History
from calcpad.models import ERROR_TEXT, EvaluatorConfig, Grammar
from calcpad.tokenizer import OPERATOR_LIKE, SPACED_OPERATORS, STREAM_OPERATORS

logger = logging.getLogger(__name__)


class CommandKind(str, Enum):
    """What a key press asks the keypad to do."""

    DIGIT = "digit"
    DECIMAL = "decimal"
    OPERATOR = "operator"
    OPEN_PAREN = "open-paren"
    CLOSE_PAREN = "close-paren"
    CLEAR = "clear"
    DELETE = "delete"
    TOGGLE_SIGN = "toggle-sign"
    EQUALS = "equals"
    MEMORY = "memory"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    text: str = ""


# Case-insensitive names for the action keys.
_ACTION_KEYS = {
    "c": CommandKind.CLEAR,
    "ac": CommandKind.CLEAR,
    "clear": CommandKind.CLEAR,
    "del": CommandKind.DELETE,
    "delete": CommandKind.DELETE,
    "backspace": CommandKind.DELETE,
    "+/-": CommandKind.TOGGLE_SIGN,
    "±": CommandKind.TOGGLE_SIGN,
    "neg": CommandKind.TOGGLE_SIGN,
    "=": CommandKind.EQUALS,
    "m": CommandKind.MEMORY,
    "mem": CommandKind.MEMORY,
    "memory": CommandKind.MEMORY,
}

_DIGITS = "0123456789"


def parse_key(text: str, grammar: Grammar = Grammar.STREAM) -> Command:
    """Map a key label to a Command.

    Multiplication is spelled the way the grammar expects: '*' on the spaced
    keypad, 'x' on the stream keypad, whichever of the two was pressed.

    Raises:
        ValueError: the label is not a calculator key.
    """
    key = text.strip()
    if len(key) == 1 and key in _DIGITS:
        return Command(CommandKind.DIGIT, key)
    if key == ".":
        return Command(CommandKind.DECIMAL, key)
    if key == "(":
        return Command(CommandKind.OPEN_PAREN, key)
    if key == ")":
        return Command(CommandKind.CLOSE_PAREN, key)

    action = _ACTION_KEYS.get(key.lower())
    if action is not None:
        return Command(action, key)

    if key in OPERATOR_LIKE:
        if key in ("*", "x"):
            key = "*" if Grammar(grammar) == Grammar.SPACED else "x"
        return Command(CommandKind.OPERATOR, key)

    raise ValueError(f"Unknown key: {text!r}")


class KeypadSession:
    """Input-assembly state machine for one calculator keypad.

    ``press`` returns what the display shows after the key. ``dialog`` holds
    the history text after a MEMORY press, until the next press.
    """

    def __init__(
        self,
        grammar: Grammar = Grammar.STREAM,
        evaluator: Optional[Evaluator] = None,
        history: Optional[History] = None,
    ):
        self.grammar = Grammar(grammar)
        self.evaluator = evaluator or Evaluator(EvaluatorConfig.for_grammar(self.grammar))
        if self.evaluator.grammar != self.grammar:
            raise ValueError(
                f"Evaluator grammar {self.evaluator.grammar.value!r} does not match "
                f"keypad grammar {self.grammar.value!r}"
            )
        self.history = history if history is not None else History()
        self.dialog: Optional[str] = None
        self.reset()

    def reset(self) -> None:
        """Clear the buffer and every flag; the display shows 0."""
        self.buffer = ""
        self.display = "0"
        self.is_new_input = True
        self.has_decimal = False
        self.last_was_operator = False

    def press(self, key: Union[str, Command]) -> str:
        command = key if isinstance(key, Command) else parse_key(key, self.grammar)
        self.dialog = None
        if self.grammar == Grammar.SPACED:
            self._press_spaced(command)
        else:
            self._press_stream(command)
        return self.display

    def press_all(self, keys: Iterable[Union[str, Command]]) -> str:
        for key in keys:
            self.press(key)
        return self.display

    # -- spaced keypad -------------------------------------------------------

    def _press_spaced(self, command: Command) -> None:
        kind = command.kind

        if kind == CommandKind.DIGIT:
            if self.is_new_input:
                self.buffer = ""
                self.has_decimal = False
                self.is_new_input = False
            self.buffer += command.text
            self.display = self.buffer
            self.last_was_operator = False

        elif kind == CommandKind.DECIMAL:
            if self.has_decimal or self.last_was_operator:
                return
            if self.is_new_input:
                self.buffer = ""
            if not self.buffer:
                self.buffer = "0"
            self.buffer += "."
            self.display = self.buffer
            self.has_decimal = True
            self.is_new_input = False

        elif kind == CommandKind.OPERATOR:
            if command.text not in SPACED_OPERATORS:
                logger.debug("Spaced keypad has no %r key", command.text)
                return
            if not self.buffer or self.last_was_operator:
                return
            self.buffer += f" {command.text} "
            self.display = self.buffer
            self.is_new_input = False
            self.has_decimal = False
            self.last_was_operator = True

        elif kind == CommandKind.CLEAR:
            self.reset()

        elif kind == CommandKind.EQUALS:
            expression = self.buffer
            result = self.evaluator.evaluate(expression)
            self.history.add(expression, result.text)
            if result.ok:
                self.display = result.text
                self.buffer = result.text
                self.has_decimal = "." in result.text
                self.last_was_operator = False
            else:
                # The buffer is kept; the next digit starts over.
                self.display = ERROR_TEXT
            self.is_new_input = True

        else:
            logger.debug("Spaced keypad ignores %s", kind.value)

    # -- stream keypad -------------------------------------------------------

    def _press_stream(self, command: Command) -> None:
        kind = command.kind

        if kind == CommandKind.MEMORY:
            self.dialog = self.history.as_text()

        elif kind == CommandKind.CLEAR:
            self.buffer = ""
            self.display = "0"

        elif kind == CommandKind.DELETE:
            self.buffer = self.buffer[:-1]
            self.display = self.buffer or "0"

        elif kind == CommandKind.EQUALS:
            expression = self.buffer
            result = self.evaluator.evaluate(expression)
            if result.ok:
                self.history.add(expression, result.text)
                self.display = result.text
                self.buffer = result.text
            else:
                self.display = ERROR_TEXT
                self.buffer = ""

        elif kind == CommandKind.TOGGLE_SIGN:
            if not self.buffer:
                return
            if self.buffer.startswith("-"):
                self.buffer = self.buffer[1:]
            else:
                self.buffer = "-" + self.buffer
            self.display = self.buffer

        else:
            if kind == CommandKind.OPERATOR:
                if command.text not in STREAM_OPERATORS:
                    logger.debug("Stream keypad has no %r key", command.text)
                    return
                # No leading or doubled operators.
                if not self.buffer or self.buffer[-1] in STREAM_OPERATORS:
                    return
            self.buffer += command.text
            self.display = self.buffer
