"""Comparison of values in query expressions."""

from __future__ import annotations

import operator
from typing import Any

_ORDERING = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_numbers(left: Any, right: Any) -> tuple[float, float]:
    """Convert both operands to floats; raise TypeError if one is not numeric."""
    if not _is_number(left):
        raise TypeError(f"left operand is not a number: {left!r} ({type(left).__name__})")
    if not _is_number(right):
        raise TypeError(f"right operand is not a number: {right!r} ({type(right).__name__})")
    return float(left), float(right)


def compare(op: str, left: Any, right: Any) -> bool:
    """Apply a comparison operator.

    Ordering operators yield False unless both sides are numbers. Equality
    compares numerically where possible and otherwise by type and value.
    """
    if op in ("=", "!="):
        try:
            a, b = to_numbers(left, right)
            equal = a == b
        except TypeError:
            equal = type(left) is type(right) and left == right
        return equal if op == "=" else not equal
    fn = _ORDERING.get(op)
    if fn is None:
        raise ValueError(f"unsupported operator: {op}")
    if not (_is_number(left) and _is_number(right)):
        return False
    return fn(float(left), float(right))