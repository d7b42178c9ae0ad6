"""Tokenizers for the two accepted input grammars.

Spaced grammar (A): tokens separated by whitespace, operators ``+ - * /``,
no parentheses. Stream grammar (B): no separators required, numbers are runs
of digits and ``.``, parentheses, operators ``+ - x / %`` (``*`` is read as
``x``), every other character skipped.
"""

from __future__ import annotations

import logging
import re

from calcpad.errors import MalformedNumber, UnknownOperator
from calcpad.models import Grammar, Token, TokenKind

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"[0-9]+(\.[0-9]+)?")
_DIGITS = "0123456789"

SPACED_OPERATORS = ("+", "-", "*", "/")
STREAM_OPERATORS = ("+", "-", "x", "/", "%")

# Anything that looks like an operator in either grammar.
OPERATOR_LIKE = frozenset("+-*x/%")

# Stream-grammar spellings folded onto their canonical symbol.
_STREAM_ALIASES = {"*": "x"}


def tokenize(expression: str, grammar: Grammar = Grammar.STREAM, strict: bool = True) -> list[Token]:
    """Split an expression into tokens according to ``grammar``."""
    if Grammar(grammar) == Grammar.SPACED:
        return tokenize_spaced(expression, strict=strict)
    return tokenize_stream(expression)


def tokenize_spaced(expression: str, strict: bool = False) -> list[Token]:
    """Tokenize a whitespace-delimited expression.

    Pieces that are neither a number nor one of ``+ - * /`` are skipped
    unless ``strict`` is set, in which case they raise MalformedNumber
    (number-like or unrecognized text) or UnknownOperator (``x``, ``%``).
    """
    tokens: list[Token] = []
    for index, piece in enumerate(expression.split()):
        if _NUMBER_RE.fullmatch(piece):
            tokens.append(Token(TokenKind.NUMBER, piece, index, float(piece)))
        elif piece in SPACED_OPERATORS:
            tokens.append(Token(TokenKind.OPERATOR, piece, index))
        elif not strict:
            logger.debug("Skipping unrecognized token %r at index %d", piece, index)
        elif piece in OPERATOR_LIKE:
            raise UnknownOperator(f"Operator {piece!r} is not supported", expression, index)
        else:
            raise MalformedNumber(f"Cannot parse token {piece!r}", expression, index)
    return tokens


def tokenize_stream(expression: str) -> list[Token]:
    """Tokenize a contiguous character stream.

    A run of digits and dots is one number literal; more than one dot in a
    run, or a dot with no digits, raises MalformedNumber.
    """
    tokens: list[Token] = []
    i = 0
    n = len(expression)

    while i < n:
        ch = expression[i]

        if ch in _DIGITS or ch == ".":
            start = i
            while i < n and (expression[i] in _DIGITS or expression[i] == "."):
                i += 1
            literal = expression[start:i]
            if literal.count(".") > 1 or literal == ".":
                raise MalformedNumber(f"Malformed number {literal!r}", expression, start)
            tokens.append(Token(TokenKind.NUMBER, literal, start, float(literal)))
            continue

        if ch == "(":
            tokens.append(Token(TokenKind.LPAREN, ch, i))
        elif ch == ")":
            tokens.append(Token(TokenKind.RPAREN, ch, i))
        elif ch in STREAM_OPERATORS or ch in _STREAM_ALIASES:
            tokens.append(Token(TokenKind.OPERATOR, _STREAM_ALIASES.get(ch, ch), i))
        elif not ch.isspace():
            logger.debug("Skipping character %r at %d", ch, i)
        i += 1

    return tokens
