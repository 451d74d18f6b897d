"""
JSON equivalence comparison.
"""

from .equivalence import (
    CompareMode,
    Comparison,
    Mismatch,
    compare_json,
    json_equals,
)

__all__ = [
    "CompareMode",
    "Comparison",
    "Mismatch",
    "compare_json",
    "json_equals",
]
