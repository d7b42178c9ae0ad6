"""Two-stack (shunting-yard) arithmetic evaluation.

Flow per call:
1. Tokenize the expression for the configured grammar
2. Push numbers onto the operand stack
3. On an operator, apply every stacked operator of equal or higher
   precedence, then push the incoming one
4. On ')', apply operators back to the matching '(' and drop the marker
5. Apply whatever is left; exactly one value must remain

Both grammars share this engine. Division-by-zero handling and strictness
come from EvaluatorConfig, whose per-grammar defaults reproduce each
keypad's behaviour.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Optional

from calcpad.errors import (
    DivisionByZero,
    EvaluationError,
    ExcessOperands,
    InsufficientOperands,
    UnbalancedParentheses,
    UnknownOperator,
)
from calcpad.models import EvaluationResult, EvaluatorConfig, Grammar, Token, TokenKind, ZeroDivisionPolicy
from calcpad.tokenizer import tokenize

logger = logging.getLogger(__name__)

_PRECEDENCE: dict[Grammar, dict[str, int]] = {
    Grammar.SPACED: {"+": 1, "-": 1, "*": 2, "/": 2},
    Grammar.STREAM: {"+": 1, "-": 1, "x": 2, "/": 2, "%": 2},
}

# Positional notation is used for magnitudes in [1e-3, 1e7).
_POSITIONAL_MIN = 1e-3
_POSITIONAL_MAX = 1e7


def precedence(symbol: str, grammar: Grammar = Grammar.STREAM) -> int:
    """Binding strength of an operator; 0 for anything unrecognized."""
    return _PRECEDENCE[Grammar(grammar)].get(symbol, 0)


def apply_operator(
    symbol: str,
    a: float,
    b: float,
    division_by_zero: ZeroDivisionPolicy = ZeroDivisionPolicy.RAISE,
    expression: str = "",
    position: Optional[int] = None,
) -> float:
    """Compute ``a <symbol> b``.

    ``b`` is the operand that was pushed last. ``%`` is the floating-point
    remainder and keeps the sign of ``a``. A zero divisor for ``/`` or ``%``
    yields 0.0 under ZeroDivisionPolicy.ZERO and raises DivisionByZero
    otherwise.
    """
    if symbol == "+":
        return a + b
    if symbol == "-":
        return a - b
    if symbol in ("*", "x"):
        return a * b
    if symbol in ("/", "%"):
        if b == 0:
            if division_by_zero == ZeroDivisionPolicy.ZERO:
                return 0.0
            raise DivisionByZero("Division by zero", expression, position)
        if symbol == "/":
            return a / b
        return math.fmod(a, b)
    raise UnknownOperator(f"Invalid operator: {symbol!r}", expression, position)


def format_number(value: float) -> str:
    """Render a double the way the calculator display shows it.

    '14.0', '0.25', '1.0E7', '1.5E-4', 'NaN', 'Infinity'.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    value = float(value)
    magnitude = abs(value)
    if magnitude == 0 or _POSITIONAL_MIN <= magnitude < _POSITIONAL_MAX:
        return repr(value)

    # Shortest round-tripping digits, re-laid out as d.dddE<exp>
    shortest = Decimal(repr(value))
    exponent = shortest.adjusted()
    sign, digits, _ = shortest.as_tuple()
    digits = list(digits)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
    fraction = "".join(str(d) for d in digits[1:]) or "0"
    return f"{'-' if sign else ''}{digits[0]}.{fraction}E{exponent}"


class Evaluator:
    """Evaluates arithmetic expressions for one grammar.

    Holds only its (immutable) configuration; every call builds its own
    stacks, so an instance can be reused freely.
    """

    def __init__(self, config: Optional[EvaluatorConfig] = None):
        self.config = config or EvaluatorConfig()

    @property
    def grammar(self) -> Grammar:
        return self.config.grammar

    def compute(self, expression: str) -> float:
        """Evaluate ``expression`` and return its value.

        Raises:
            EvaluationError: any subclass, when the expression is malformed
                or the arithmetic is refused.
        """
        grammar = self.config.grammar
        tokens = tokenize(expression, grammar, strict=self.config.strict)
        operands: list[float] = []
        operators: list[Token] = []

        for token in tokens:
            if token.kind == TokenKind.NUMBER:
                operands.append(token.value)

            elif token.kind == TokenKind.LPAREN:
                operators.append(token)

            elif token.kind == TokenKind.RPAREN:
                while operators and operators[-1].kind != TokenKind.LPAREN:
                    self._reduce(operands, operators.pop(), expression)
                if not operators:
                    raise UnbalancedParentheses("Unmatched ')'", expression, token.position)
                operators.pop()

            else:
                incoming = precedence(token.text, grammar)
                while (
                    operators
                    and operators[-1].kind != TokenKind.LPAREN
                    and precedence(operators[-1].text, grammar) >= incoming
                ):
                    self._reduce(operands, operators.pop(), expression)
                operators.append(token)

        while operators:
            top = operators.pop()
            if top.kind == TokenKind.LPAREN:
                raise UnbalancedParentheses("Unclosed '('", expression, top.position)
            self._reduce(operands, top, expression)

        if not operands:
            raise InsufficientOperands("Nothing to evaluate", expression)
        if len(operands) > 1:
            raise ExcessOperands(
                f"{len(operands)} values left without operators between them", expression
            )
        return operands[-1]

    def evaluate(self, expression: str) -> EvaluationResult:
        """Evaluate ``expression`` without raising.

        Any failure, including float errors that escape the operator table,
        comes back as a failed EvaluationResult.
        """
        try:
            value = self.compute(expression)
        except EvaluationError as e:
            logger.debug("Evaluation of %r failed: %s: %s", expression, type(e).__name__, e)
            return EvaluationResult(expression=expression, error=e)
        except (ArithmeticError, ValueError) as e:
            logger.debug("Evaluation of %r failed in float math: %s", expression, e)
            error = EvaluationError(str(e), expression)
            error.__cause__ = e
            return EvaluationResult(expression=expression, error=error)
        return EvaluationResult(expression=expression, value=value)

    def _reduce(self, operands: list[float], operator: Token, expression: str) -> None:
        """Pop two operands, apply ``operator``, push the result."""
        if len(operands) < 2:
            if not self.config.strict:
                # Lenient mode leaves the stack untouched.
                logger.debug(
                    "Skipping %r at %d: %d operand(s) available",
                    operator.text, operator.position, len(operands),
                )
                return
            raise InsufficientOperands(
                f"Operator {operator.text!r} needs two operands", expression, operator.position
            )
        b = operands.pop()
        a = operands.pop()
        operands.append(
            apply_operator(
                operator.text, a, b,
                division_by_zero=self.config.division_by_zero,
                expression=expression,
                position=operator.position,
            )
        )


def evaluate(
    expression: str,
    grammar: Grammar = Grammar.STREAM,
    division_by_zero: Optional[ZeroDivisionPolicy] = None,
    strict: Optional[bool] = None,
) -> EvaluationResult:
    """Evaluate with the grammar's defaults plus any explicit overrides."""
    config = EvaluatorConfig.for_grammar(grammar).with_overrides(division_by_zero, strict)
    return Evaluator(config).evaluate(expression)
