"""calcpad — keypad calculator expression evaluator.

Parses and evaluates arithmetic typed on a calculator keypad, with correct
operator precedence and, in the stream grammar, parentheses. Two grammars
share one two-stack engine:

    spaced  "3 + 4 * 2"   + - * /, no parentheses, x/0 -> 0
    stream  "(3+4)x2"     + - x / %, parentheses, x/0 is an error

Usage:
    python -m calcpad eval "(3+4)x2"            # 14.0
    python -m calcpad eval "3 + 4 * 2" -g spaced
    python -m calcpad keys 1 0 % 3 =            # Replay keypad presses
    python -m calcpad repl                      # Interactive session
"""

from calcpad.evaluator import Evaluator, evaluate, format_number
from calcpad.models import EvaluationResult, EvaluatorConfig, Grammar, ZeroDivisionPolicy

__all__ = [
    "Evaluator",
    "evaluate",
    "format_number",
    "EvaluationResult",
    "EvaluatorConfig",
    "Grammar",
    "ZeroDivisionPolicy",
]
