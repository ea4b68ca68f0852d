"""
Schema Validator - Compare a file's header row against the batch baseline.

Comparison is positional and exact: same length, same names, same order.
Headers are not trimmed or case-folded.
"""

from typing import Sequence

from .errors import SchemaMismatchError
from .models import SchemaCheck


def validate_columns(baseline: Sequence[str], candidate: Sequence[str]) -> SchemaCheck:
    """
    Check a candidate header against the baseline.

    Returns:
        SchemaCheck with ok=False and both header lists on mismatch
    """
    expected = tuple(baseline)
    found = tuple(candidate)
    return SchemaCheck(expected=expected, found=found, ok=expected == found)


def ensure_same_columns(baseline: Sequence[str], candidate: Sequence[str]) -> None:
    """Raise SchemaMismatchError unless the headers are identical."""
    check = validate_columns(baseline, candidate)
    if not check.ok:
        raise SchemaMismatchError(check.expected, check.found, check.message)
