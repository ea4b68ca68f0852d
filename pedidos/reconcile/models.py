"""
Data models for catalog / order-line reconciliation.

All structured data uses frozen dataclasses so tables, batches and results
can be shared between readers (API response, report writer, CLI) once built.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import PreconditionError

# A record maps column name -> cell value ("" for absent cells).
Record = Mapping[str, Any]


class OutcomeStatus(Enum):
    """Lifecycle state of a single ingested file."""
    PENDING = "pending"                  # Registered, decode not attempted yet
    OK = "ok"                            # Decoded and merged
    DECODE_ERROR = "decode_error"        # Bytes could not be read as a sheet
    SCHEMA_MISMATCH = "schema_mismatch"  # Headers differ from the batch baseline


@dataclass(frozen=True)
class Table:
    """
    An ordered header plus ordered records.

    Every record has a value for every column; records are stored as
    read-only mappings so a Table is safe to hand out.
    """
    columns: tuple[str, ...] = ()
    records: tuple[Record, ...] = ()

    @classmethod
    def build(cls, columns, records) -> "Table":
        """Build a Table from plain lists/dicts, freezing the records."""
        return cls(
            columns=tuple(columns),
            records=tuple(MappingProxyType(dict(r)) for r in records),
        )

    @property
    def row_count(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def column_values(self, name: str) -> list[Any]:
        """All values of one column, in row order."""
        return [r.get(name, "") for r in self.records]

    def preview(self, limit: int = 5) -> list[dict[str, Any]]:
        """First few records as plain dicts (for logs and API previews)."""
        return [dict(r) for r in self.records[:limit]]


@dataclass(frozen=True)
class RawFile:
    """An uploaded file: name plus raw bytes."""
    name: str
    content: bytes


@dataclass(frozen=True)
class FileIngestOutcome:
    """
    Result of decoding and validating one file of a batch.

    Created in PENDING state when the file is registered and completed
    exactly once via `succeeded` / `failed`.
    """
    name: str
    table: Optional[Table] = None
    processed: bool = False
    error: Optional[str] = None
    status: OutcomeStatus = OutcomeStatus.PENDING

    @classmethod
    def pending(cls, name: str) -> "FileIngestOutcome":
        return cls(name=name)

    def succeeded(self, table: Table) -> "FileIngestOutcome":
        return FileIngestOutcome(
            name=self.name,
            table=table,
            processed=True,
            error=None,
            status=OutcomeStatus.OK,
        )

    def failed(
        self,
        error: str,
        status: OutcomeStatus,
        table: Optional[Table] = None,
    ) -> "FileIngestOutcome":
        return FileIngestOutcome(
            name=self.name,
            table=table,
            processed=True,
            error=error,
            status=status,
        )

    @property
    def ok(self) -> bool:
        return self.processed and self.error is None

    @property
    def row_count(self) -> int:
        return self.table.row_count if self.table is not None else 0


@dataclass(frozen=True)
class ConsolidatedBatch:
    """
    Merged order-line table built from several files.

    `table` always holds the rows of the files that passed validation,
    even when `valid` is False. Use `usable_table()` to get a table that is
    safe to reconcile against.
    """
    columns: tuple[str, ...] = ()
    records: tuple[Record, ...] = ()
    valid: bool = True
    outcomes: tuple[FileIngestOutcome, ...] = ()

    @property
    def table(self) -> Table:
        return Table(columns=self.columns, records=self.records)

    @property
    def file_count(self) -> int:
        return len(self.outcomes)

    @property
    def failed_outcomes(self) -> list[FileIngestOutcome]:
        return [o for o in self.outcomes if o.error is not None]

    def usable_table(self, allow_partial: bool = False) -> Table:
        """
        Consolidated table for downstream reconciliation.

        Raises PreconditionError when the batch is invalid, unless the caller
        explicitly opts into the partial table.
        """
        if not self.valid and not allow_partial:
            names = ", ".join(o.name for o in self.failed_outcomes)
            raise PreconditionError(
                f"Order-line batch has errors ({names}); fix the files before reconciling"
            )
        return self.table


@dataclass(frozen=True)
class ReconciliationEntry:
    """One catalog value that does not appear in the order lines."""
    key: str
    label: str

    @property
    def display(self) -> str:
        return f"{self.key} - {self.label}"


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Sorted, deduplicated catalog values missing from the orders.

    The counts mirror the summary printed after each comparison.
    """
    entries: tuple[ReconciliationEntry, ...] = ()
    catalog_key_column: str = ""
    order_key_column: str = ""
    catalog_distinct: int = 0
    order_distinct: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def keys(self) -> list[str]:
        return [e.key for e in self.entries]


@dataclass(frozen=True)
class SchemaCheck:
    """Outcome of comparing a candidate header against the baseline."""
    expected: tuple[str, ...]
    found: tuple[str, ...]
    ok: bool = field(default=True)

    @property
    def message(self) -> str:
        if self.ok:
            return ""
        return (
            "Columns do not match the first file. "
            f"Expected: [{', '.join(self.expected)}], "
            f"Found: [{', '.join(self.found)}]"
        )
