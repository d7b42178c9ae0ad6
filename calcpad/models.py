"""Data models for the calcpad evaluator.

Grammar and policy enums, Token, EvaluatorConfig, EvaluationResult,
HistoryEntry — the typed structures that flow through
tokenizer → evaluator → keypad → CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from calcpad.errors import EvaluationError


class Grammar(str, Enum):
    """Accepted input syntaxes."""

    SPACED = "spaced"  # Grammar A: "3 + 4 * 2"
    STREAM = "stream"  # Grammar B: "(3+4)x2"


class ZeroDivisionPolicy(str, Enum):
    """What dividing (or taking a remainder) by zero does."""

    ZERO = "zero"
    RAISE = "raise"


class TokenKind(str, Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    LPAREN = "lparen"
    RPAREN = "rparen"


ALL_GRAMMARS = [Grammar.SPACED, Grammar.STREAM]

# Shown in place of a value whenever evaluation fails.
ERROR_TEXT = "Error"


@dataclass(frozen=True)
class Token:
    """A lexical unit of an expression.

    ``position`` is the character offset for the stream grammar and the
    token index for the spaced grammar.
    """

    kind: TokenKind
    text: str
    position: int = 0
    value: Optional[float] = None


@dataclass(frozen=True)
class EvaluatorConfig:
    """Per-deployment evaluation settings.

    Each grammar has its own defaults (see ``for_grammar``): the spaced
    grammar quietly turns division by zero into 0 and skips operators that
    lack operands, the stream grammar reports both as errors.
    """

    grammar: Grammar = Grammar.STREAM
    division_by_zero: ZeroDivisionPolicy = ZeroDivisionPolicy.RAISE
    strict: bool = True

    @classmethod
    def for_grammar(cls, grammar: Grammar) -> EvaluatorConfig:
        """Return the default configuration for a grammar."""
        grammar = Grammar(grammar)
        if grammar == Grammar.SPACED:
            return cls(grammar=grammar, division_by_zero=ZeroDivisionPolicy.ZERO, strict=False)
        return cls(grammar=grammar, division_by_zero=ZeroDivisionPolicy.RAISE, strict=True)

    def with_overrides(
        self,
        division_by_zero: Optional[ZeroDivisionPolicy] = None,
        strict: Optional[bool] = None,
    ) -> EvaluatorConfig:
        """Copy with any non-None overrides applied."""
        changes: dict = {}
        if division_by_zero is not None:
            changes["division_by_zero"] = ZeroDivisionPolicy(division_by_zero)
        if strict is not None:
            changes["strict"] = strict
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "grammar": self.grammar.value,
            "division_by_zero": self.division_by_zero.value,
            "strict": self.strict,
        }


@dataclass
class EvaluationResult:
    """Outcome of a single evaluation: either a value or an error, never both."""

    expression: str
    value: Optional[float] = None
    error: Optional[EvaluationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None

    @property
    def text(self) -> str:
        """Display form of the value, or the generic error indicator."""
        if not self.ok:
            return ERROR_TEXT
        from calcpad.evaluator import format_number

        return format_number(self.value)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        d = {
            "expression": self.expression,
            "ok": self.ok,
            "value": self.value,
            "text": self.text,
        }
        if self.error is not None:
            d["error"] = {
                "kind": type(self.error).__name__,
                "message": str(self.error),
            }
        return d


@dataclass
class HistoryEntry:
    """One line of calculation history."""

    expression: str
    result: str

    def __str__(self) -> str:
        return f"{self.expression} = {self.result}"


@dataclass
class GrammarInfo:
    """Description of a grammar for listings."""

    grammar: Grammar
    description: str
    operators: list[str] = field(default_factory=list)
    parentheses: bool = False

    @property
    def defaults(self) -> EvaluatorConfig:
        return EvaluatorConfig.for_grammar(self.grammar)


GRAMMAR_INFO = {
    Grammar.SPACED: GrammarInfo(
        grammar=Grammar.SPACED,
        description="Space-delimited tokens, no parentheses",
        operators=["+", "-", "*", "/"],
        parentheses=False,
    ),
    Grammar.STREAM: GrammarInfo(
        grammar=Grammar.STREAM,
        description="Contiguous characters with parentheses",
        operators=["+", "-", "x", "/", "%"],
        parentheses=True,
    ),
}
