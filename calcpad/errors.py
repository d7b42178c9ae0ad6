"""Evaluation error taxonomy.

Every failure inside the evaluator raises a subclass of EvaluationError.
``Evaluator.evaluate`` catches them at the boundary and returns a failed
EvaluationResult instead, so callers only ever see a generic failure.
"""

from __future__ import annotations

from typing import Optional


class EvaluationError(Exception):
    """Base class for all evaluation failures."""

    def __init__(self, message: str, expression: str = "", position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.expression = expression
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at {self.position})"


class MalformedNumber(EvaluationError):
    """A numeric token fails to parse."""


class UnbalancedParentheses(EvaluationError):
    """A ')' without a matching '(' or a '(' left open."""


class InsufficientOperands(EvaluationError):
    """An operator was applied with fewer than two values available."""


class ExcessOperands(EvaluationError):
    """More than one value remained once every operator was applied."""


class DivisionByZero(EvaluationError):
    """Division or remainder by zero under the raising policy."""


class UnknownOperator(EvaluationError):
    """An operator-like symbol with no defined semantics."""


class ConfigError(ValueError):
    """Invalid calcpad configuration value."""
