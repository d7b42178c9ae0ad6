"""Evaluator configuration from CALCPAD_* environment variables.

Each reader takes an optional env mapping (defaults to os.environ) so the
CLI and tests can pass their own. CLI options override what is read here.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from calcpad.errors import ConfigError
from calcpad.models import EvaluatorConfig, Grammar, ZeroDivisionPolicy

ENV_GRAMMAR = "CALCPAD_GRAMMAR"
ENV_DIVISION_BY_ZERO = "CALCPAD_DIVISION_BY_ZERO"
ENV_STRICT = "CALCPAD_STRICT"
ENV_LOG_LEVEL = "CALCPAD_LOG_LEVEL"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _get(env: Mapping[str, str], key: str) -> Optional[str]:
    """Stripped, lowercased value or None when unset/blank."""
    raw = env.get(key)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower()


def parse_grammar(value: str) -> Grammar:
    try:
        return Grammar(value.strip().lower())
    except ValueError:
        choices = ", ".join(g.value for g in Grammar)
        raise ConfigError(f"Invalid grammar: {value!r}. Choose: {choices}") from None


def parse_policy(value: str) -> ZeroDivisionPolicy:
    try:
        return ZeroDivisionPolicy(value.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in ZeroDivisionPolicy)
        raise ConfigError(f"Invalid division-by-zero policy: {value!r}. Choose: {choices}") from None


def parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean: {value!r}")


def load_config(
    env: Optional[Mapping[str, str]] = None,
    grammar: Optional[Grammar] = None,
) -> EvaluatorConfig:
    """Build an EvaluatorConfig from the environment.

    The grammar comes from ``grammar`` if given, else CALCPAD_GRAMMAR
    (default: stream); the policy and strictness fall back to that
    grammar's defaults when unset.

    Raises:
        ConfigError: a variable is set to an unrecognized value.
    """
    env = os.environ if env is None else env

    if grammar is None:
        grammar_raw = _get(env, ENV_GRAMMAR)
        grammar = parse_grammar(grammar_raw) if grammar_raw else Grammar.STREAM

    policy_raw = _get(env, ENV_DIVISION_BY_ZERO)
    strict_raw = _get(env, ENV_STRICT)

    return EvaluatorConfig.for_grammar(grammar).with_overrides(
        division_by_zero=parse_policy(policy_raw) if policy_raw else None,
        strict=parse_bool(strict_raw) if strict_raw else None,
    )


def log_level(env: Optional[Mapping[str, str]] = None) -> int:
    """Logging level named by CALCPAD_LOG_LEVEL (default WARNING)."""
    env = os.environ if env is None else env
    name = (_get(env, ENV_LOG_LEVEL) or "warning").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigError(f"Invalid log level: {name!r}")
    return level
