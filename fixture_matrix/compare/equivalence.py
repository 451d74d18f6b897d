"""
JSON equivalence comparison.

Two modes:
- STRICT: deep structural equality
- TOLERANT: strict, plus acceptance of representational drift

Strict rules:
- Objects: same key set, equal values (key order irrelevant)
- Arrays: same length, equal values in the same order
- Booleans are never equal to numbers
- Numbers compare by value (1 == 1.0, JSON has one number type)

Tolerant additions:
- A key holding null on one side and missing on the other is equivalent
- Floats are equal within a relative tolerance

Comparison never mutates its inputs.
"""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

FLOAT_REL_TOLERANCE = 1e-9

_MISSING = object()


class CompareMode(str, Enum):
    STRICT = "strict"
    TOLERANT = "tolerant"


class Comparison(BaseModel):
    """Result of comparing two JSON values."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    equal: bool
    mode: CompareMode
    path: Optional[str] = None
    """JSON path of the first difference (None when equal)."""


class Mismatch(BaseModel):
    """
    Structured diagnostic for a failed comparison.

    Records both values and where the actual value came from,
    so a mismatch can be reproduced by hand.
    """

    model_config = ConfigDict(extra="forbid")

    expected: Any
    actual: Any
    mode: CompareMode
    path: Optional[str] = None
    expected_file: Optional[str] = None
    json_file: Optional[str] = None
    command: Optional[str] = None
    cwd: Optional[str] = None
    sample: Optional[str] = None
    diff: Optional[str] = None
    """Unified diff, for text artifacts."""
    message: str = "Output is not equivalent to input"

    def describe(self) -> str:
        """One-line description for logs."""
        source = self.command or self.json_file or "<value>"
        where = f" at {self.path}" if self.path else ""
        return f"{self.message}{where} ({self.mode.value}): {source}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _numbers_equal(a: Any, b: Any, tolerant: bool) -> bool:
    if a == b:
        return True
    if tolerant and (isinstance(a, float) or isinstance(b, float)):
        # ints beyond float range cannot be close to any float
        try:
            return math.isclose(a, b, rel_tol=FLOAT_REL_TOLERANCE)
        except OverflowError:
            return False
    return False


def _first_difference(expected: Any, actual: Any, path: str, tolerant: bool) -> Optional[str]:
    """Return the path of the first difference, or None if equivalent."""
    if _is_number(expected) and _is_number(actual):
        return None if _numbers_equal(expected, actual, tolerant) else path

    if isinstance(expected, bool) or isinstance(actual, bool):
        if type(expected) is not type(actual) or expected != actual:
            return path
        return None

    if isinstance(expected, dict) and isinstance(actual, dict):
        for key in sorted(set(expected) | set(actual), key=str):
            left = expected.get(key, _MISSING)
            right = actual.get(key, _MISSING)
            child = f"{path}.{key}"
            if left is _MISSING or right is _MISSING:
                present = right if left is _MISSING else left
                if tolerant and present is None:
                    continue
                return child
            found = _first_difference(left, right, child, tolerant)
            if found is not None:
                return found
        return None

    if isinstance(expected, list) and isinstance(actual, list):
        if len(expected) != len(actual):
            return path
        for index, (left, right) in enumerate(zip(expected, actual)):
            found = _first_difference(left, right, f"{path}[{index}]", tolerant)
            if found is not None:
                return found
        return None

    if type(expected) is not type(actual):
        return path
    return None if expected == actual else path


def compare_json(expected: Any, actual: Any, strict: bool = True) -> Comparison:
    """
    Compare two parsed JSON values.

    Args:
        expected: Reference value
        actual: Value under test
        strict: STRICT mode if True, TOLERANT otherwise

    Returns:
        Comparison with the first differing path when not equal
    """
    mode = CompareMode.STRICT if strict else CompareMode.TOLERANT
    path = _first_difference(expected, actual, "$", tolerant=not strict)
    return Comparison(equal=path is None, mode=mode, path=path)


def json_equals(expected: Any, actual: Any, strict: bool = True) -> bool:
    return compare_json(expected, actual, strict=strict).equal
