"""Tests for the keypad input-assembly state machine.

Spaced keypad: operator spacing, decimal guard, new-input handling,
silent x/0. Stream keypad: operator guard, delete, sign toggle, history
and the Error reset.
"""

import pytest

from calcpad.evaluator import Evaluator
from calcpad.history import EMPTY_MESSAGE, History
from calcpad.keypad import Command, CommandKind, KeypadSession, parse_key
from calcpad.models import ERROR_TEXT, EvaluatorConfig, Grammar


@pytest.fixture
def spaced():
    return KeypadSession(Grammar.SPACED)


@pytest.fixture
def stream():
    return KeypadSession(Grammar.STREAM)


# --- Key parsing ---

def test_parse_digits_and_actions():
    assert parse_key("7") == Command(CommandKind.DIGIT, "7")
    assert parse_key(".").kind == CommandKind.DECIMAL
    assert parse_key("C").kind == CommandKind.CLEAR
    assert parse_key("del").kind == CommandKind.DELETE
    assert parse_key("+/-").kind == CommandKind.TOGGLE_SIGN
    assert parse_key("=").kind == CommandKind.EQUALS
    assert parse_key("M").kind == CommandKind.MEMORY


def test_parse_multiplication_per_grammar():
    assert parse_key("x", Grammar.SPACED) == Command(CommandKind.OPERATOR, "*")
    assert parse_key("*", Grammar.STREAM) == Command(CommandKind.OPERATOR, "x")


def test_parse_unknown_key():
    with pytest.raises(ValueError):
        parse_key("?")


def test_mismatched_evaluator_rejected():
    with pytest.raises(ValueError):
        KeypadSession(Grammar.SPACED, evaluator=Evaluator(EvaluatorConfig.for_grammar(Grammar.STREAM)))


# --- Spaced keypad ---

def test_spaced_builds_spaced_expression(spaced):
    assert spaced.press_all(["3", "+", "4", "*", "2"]) == "3 + 4 * 2"
    assert spaced.press("=") == "11.0"
    assert spaced.buffer == "11.0"


def test_spaced_ignores_consecutive_operators(spaced):
    spaced.press_all(["3", "+", "-", "4"])
    assert spaced.buffer == "3 + 4"


def test_spaced_ignores_leading_operator(spaced):
    assert spaced.press("+") == "0"
    assert spaced.buffer == ""


def test_spaced_decimal_guard(spaced):
    assert spaced.press(".") == "0."
    assert spaced.press("5") == "0.5"
    assert spaced.press(".") == "0.5"


def test_spaced_no_decimal_right_after_operator(spaced):
    spaced.press_all(["3", "+", "."])
    assert spaced.buffer == "3 + "
    spaced.press_all(["1", ".", "5"])
    assert spaced.buffer == "3 + 1.5"


def test_spaced_digit_after_result_starts_over(spaced):
    spaced.press_all(["2", "+", "3", "="])
    assert spaced.press("7") == "7"
    assert spaced.press(".") == "7."


def test_spaced_operator_after_result_continues(spaced):
    assert spaced.press_all(["2", "+", "3", "=", "x", "2", "="]) == "10.0"


def test_spaced_division_by_zero_shows_zero(spaced):
    assert spaced.press_all(["5", "/", "0", "="]) == "0.0"


def test_spaced_error_then_recover(spaced):
    assert spaced.press_all(["5", ".", "="]) == ERROR_TEXT
    assert spaced.press("4") == "4"


def test_spaced_clear(spaced):
    spaced.press_all(["9", "+", "1"])
    assert spaced.press("C") == "0"
    assert spaced.buffer == ""
    assert spaced.is_new_input
    assert not spaced.last_was_operator


def test_spaced_ignores_stream_only_keys(spaced):
    spaced.press("8")
    for key in ["(", ")", "DEL", "+/-", "%"]:
        assert spaced.press(key) == "8"


def test_spaced_records_history(spaced):
    spaced.press_all(["1", "+", "1", "=", "C", "="])
    assert [str(e) for e in spaced.history] == ["1 + 1 = 2.0", " = Error"]


# --- Stream keypad ---

def test_stream_modulo_and_history(stream):
    assert stream.press_all(["1", "0", "%", "3", "="]) == "1.0"
    assert [str(e) for e in stream.history] == ["10%3 = 1.0"]


def test_stream_parentheses(stream):
    assert stream.press_all(["(", "3", "+", "4", ")", "*", "2"]) == "(3+4)x2"
    assert stream.press("=") == "14.0"


def test_stream_operator_guard(stream):
    assert stream.press("-") == "0"
    assert stream.press_all(["3", "+", "x"]) == "3+"


def test_stream_delete(stream):
    stream.press_all(["1", "2"])
    assert stream.press("DEL") == "1"
    assert stream.press("DEL") == "0"
    assert stream.press("DEL") == "0"


def test_stream_toggle_sign(stream):
    assert stream.press("+/-") == "0"
    stream.press("5")
    assert stream.press("+/-") == "-5"
    assert stream.press("+/-") == "5"


def test_stream_error_clears_buffer(stream):
    assert stream.press_all(["5", "/", "0", "="]) == ERROR_TEXT
    assert stream.buffer == ""
    assert len(stream.history) == 0


def test_stream_unbalanced_is_error(stream):
    assert stream.press_all(["(", "3", "="]) == ERROR_TEXT


def test_stream_result_feeds_next_expression(stream):
    assert stream.press_all(["2", "+", "2", "=", "x", "3", "="]) == "12.0"
    assert [str(e) for e in stream.history] == ["2+2 = 4.0", "4.0x3 = 12.0"]


def test_stream_memory(stream):
    stream.press("M")
    assert stream.dialog == EMPTY_MESSAGE
    stream.press_all(["2", "+", "2", "=", "M"])
    assert stream.dialog == "2+2 = 4.0\n"
    assert stream.display == "4.0"
    stream.press("1")
    assert stream.dialog is None


def test_stream_clear(stream):
    stream.press_all(["4", "x", "4"])
    assert stream.press("C") == "0"
    assert stream.buffer == ""


def test_shared_history():
    history = History()
    KeypadSession(Grammar.STREAM, history=history).press_all(["1", "+", "1", "="])
    KeypadSession(Grammar.STREAM, history=history).press_all(["2", "x", "2", "="])
    assert len(history) == 2
