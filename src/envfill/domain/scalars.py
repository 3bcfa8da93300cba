"""Strict scalar parsing following the YAML 1.2 core schema.

Only the canonical lexical forms are accepted: no surrounding
whitespace, no underscores, no ``yes``/``on`` booleans.
"""

from __future__ import annotations

import enum
import math
import re
from collections.abc import Callable, Sequence
from typing import Any

INT_PATTERN = re.compile(r"[-+]?[0-9]+")
OCT_PATTERN = re.compile(r"0o[0-7]+")
HEX_PATTERN = re.compile(r"0x[0-9a-fA-F]+")
FLOAT_PATTERN = re.compile(r"[-+]?(\.[0-9]+|[0-9]+(\.[0-9]*)?)([eE][-+]?[0-9]+)?")
INF_PATTERN = re.compile(r"([-+]?)\.(inf|Inf|INF)")
NAN_PATTERN = re.compile(r"\.(nan|NaN|NAN)")

TRUE_TOKENS = frozenset({"true", "True", "TRUE"})
FALSE_TOKENS = frozenset({"false", "False", "FALSE"})
NULL_TOKENS = frozenset({"", "~", "null", "Null", "NULL"})


def parse_int(text: str) -> int:
    """Parse a decimal, ``0o`` octal, or ``0x`` hex integer."""
    if INT_PATTERN.fullmatch(text):
        return int(text, 10)
    if OCT_PATTERN.fullmatch(text):
        return int(text[2:], 8)
    if HEX_PATTERN.fullmatch(text):
        return int(text[2:], 16)
    msg = f"{text!r} is not an integer"
    raise ValueError(msg)


def parse_float(text: str) -> float:
    """Parse a float; integer forms are accepted."""
    if FLOAT_PATTERN.fullmatch(text):
        return float(text)
    inf = INF_PATTERN.fullmatch(text)
    if inf:
        return -math.inf if inf.group(1) == "-" else math.inf
    if NAN_PATTERN.fullmatch(text):
        return math.nan
    msg = f"{text!r} is not a float"
    raise ValueError(msg)


def parse_bool(text: str) -> bool:
    if text in TRUE_TOKENS:
        return True
    if text in FALSE_TOKENS:
        return False
    msg = f"{text!r} is not a boolean (expected true or false)"
    raise ValueError(msg)


def is_null_token(text: str) -> bool:
    return text in NULL_TOKENS


_LITERAL_PARSERS: dict[type, Callable[[str], Any]] = {
    bool: parse_bool,
    int: parse_int,
    float: parse_float,
}


def parse_literal(text: str, members: Sequence[Any]) -> Any:
    """Return the ``Literal`` member spelled by *text*.

    String members match verbatim, enum members by value, and int, float
    and bool members through the strict parsers above, so ``"2"`` selects
    ``2`` and ``"true"`` selects ``True`` but ``"yes"`` selects nothing.
    """
    for member in members:
        if isinstance(member, enum.Enum):
            if text == str(member.value):
                return member
            continue
        if isinstance(member, str):
            if text == member:
                return member
            continue
        parser = _LITERAL_PARSERS.get(type(member))
        if parser is None:
            continue
        try:
            value = parser(text)
        except ValueError:
            continue
        if type(value) is type(member) and value == member:
            return member
    choices = ", ".join(repr(member) for member in members)
    msg = f"{text!r} is not one of {choices}"
    raise ValueError(msg)
