"""
Error types for the reconciliation engine.

Per-file problems (DecodeError, SchemaMismatchError) are captured into the
batch outcome and never abort a batch. PreconditionError is raised before a
reconciliation starts and means no result was produced.
"""

from typing import Sequence


class ReconcileError(Exception):
    """Base class for all reconciliation errors."""


class DecodeError(ReconcileError, ValueError):
    """Input bytes could not be read as a spreadsheet."""


class SchemaMismatchError(ReconcileError, ValueError):
    """A file's header row differs from the batch baseline."""

    def __init__(self, expected: Sequence[str], found: Sequence[str], message: str = ""):
        self.expected = tuple(expected)
        self.found = tuple(found)
        super().__init__(message or f"Expected: {list(self.expected)}, Found: {list(self.found)}")


class PreconditionError(ReconcileError, ValueError):
    """Reconciliation inputs are incomplete (no column, empty table, ...)."""
