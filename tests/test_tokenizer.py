"""Tests for the spaced and stream tokenizers."""

import pytest

from calcpad.errors import MalformedNumber, UnknownOperator
from calcpad.models import Grammar, TokenKind
from calcpad.tokenizer import tokenize, tokenize_spaced, tokenize_stream


def kinds(tokens):
    return [t.kind for t in tokens]


def texts(tokens):
    return [t.text for t in tokens]


# --- Spaced grammar ---

def test_spaced_basic():
    tokens = tokenize_spaced("12 + 3.5 * 2")
    assert texts(tokens) == ["12", "+", "3.5", "*", "2"]
    assert kinds(tokens) == [
        TokenKind.NUMBER, TokenKind.OPERATOR, TokenKind.NUMBER,
        TokenKind.OPERATOR, TokenKind.NUMBER,
    ]
    assert tokens[2].value == pytest.approx(3.5)


def test_spaced_positions_are_token_indexes():
    tokens = tokenize_spaced("1  -  2")
    assert [t.position for t in tokens] == [0, 1, 2]


def test_spaced_lenient_skips_unknown():
    assert texts(tokenize_spaced("4 x 2 . abc")) == ["4", "2"]


def test_spaced_strict_rejects_number_like():
    with pytest.raises(MalformedNumber):
        tokenize_spaced("1.", strict=True)
    with pytest.raises(MalformedNumber):
        tokenize_spaced(".5", strict=True)


def test_spaced_strict_rejects_foreign_operator():
    with pytest.raises(UnknownOperator):
        tokenize_spaced("4 x 2", strict=True)


def test_spaced_has_no_parentheses():
    assert texts(tokenize_spaced("( 1 )")) == ["1"]


# --- Stream grammar ---

def test_stream_basic():
    tokens = tokenize_stream("12.5x(3+4)")
    assert texts(tokens) == ["12.5", "x", "(", "3", "+", "4", ")"]
    assert tokens[0].value == pytest.approx(12.5)
    assert tokens[2].kind == TokenKind.LPAREN
    assert tokens[6].kind == TokenKind.RPAREN


def test_stream_positions_are_offsets():
    tokens = tokenize_stream("10 % 3")
    assert [t.position for t in tokens] == [0, 3, 5]


def test_stream_star_is_times():
    tokens = tokenize_stream("2*3")
    assert texts(tokens) == ["2", "x", "3"]


def test_stream_skips_other_characters():
    assert texts(tokenize_stream("2 a+ b3")) == ["2", "+", "3"]


def test_stream_leading_and_trailing_dot():
    assert tokenize_stream(".5")[0].value == pytest.approx(0.5)
    assert tokenize_stream("5.")[0].value == pytest.approx(5.0)


def test_stream_malformed_numbers():
    with pytest.raises(MalformedNumber):
        tokenize_stream("1.2.3")
    with pytest.raises(MalformedNumber):
        tokenize_stream("2+.")


def test_dispatch_by_grammar():
    assert texts(tokenize("3 * 4", Grammar.SPACED)) == ["3", "*", "4"]
    assert texts(tokenize("3*4", Grammar.STREAM)) == ["3", "x", "4"]
