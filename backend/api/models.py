"""
Pydantic request/response models for the API.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from pedidos.reconcile import ConsolidatedBatch, FileIngestOutcome, ReconciliationResult, Table


# ============== Uploads ==============

class TableSummary(BaseModel):
    name: str = ""
    columns: List[str]
    row_count: int
    preview: List[Dict[str, Any]] = []

    @classmethod
    def from_table(cls, table: Table, name: str = "", preview_rows: int = 5) -> "TableSummary":
        return cls(
            name=name,
            columns=list(table.columns),
            row_count=table.row_count,
            preview=table.preview(preview_rows),
        )


class FileOutcomeModel(BaseModel):
    name: str
    status: str
    processed: bool
    error: Optional[str] = None
    row_count: int = 0
    columns: List[str] = []

    @classmethod
    def from_outcome(cls, outcome: FileIngestOutcome) -> "FileOutcomeModel":
        return cls(
            name=outcome.name,
            status=outcome.status.value,
            processed=outcome.processed,
            error=outcome.error,
            row_count=outcome.row_count,
            columns=list(outcome.table.columns) if outcome.table is not None else [],
        )


class BatchSummary(BaseModel):
    """Per-file outcomes of an order-line upload."""
    valid: bool
    columns: List[str]
    record_count: int
    files: List[FileOutcomeModel]

    @classmethod
    def from_batch(cls, batch: ConsolidatedBatch) -> "BatchSummary":
        return cls(
            valid=batch.valid,
            columns=list(batch.columns),
            record_count=len(batch.records),
            files=[FileOutcomeModel.from_outcome(o) for o in batch.outcomes],
        )


# ============== Reconciliation ==============

class EntryModel(BaseModel):
    key: str
    label: str
    display: str


class ReconcileResponse(BaseModel):
    catalog_column: str
    orders_column: str
    catalog_distinct: int
    orders_distinct: int
    missing_count: int
    clean_row_count: int
    entries: List[EntryModel]
    orders: BatchSummary

    @classmethod
    def build(
        cls,
        result: ReconciliationResult,
        batch: ConsolidatedBatch,
        clean_row_count: int,
    ) -> "ReconcileResponse":
        return cls(
            catalog_column=result.catalog_key_column,
            orders_column=result.order_key_column,
            catalog_distinct=result.catalog_distinct,
            orders_distinct=result.order_distinct,
            missing_count=len(result),
            clean_row_count=clean_row_count,
            entries=[EntryModel(key=e.key, label=e.label, display=e.display) for e in result],
            orders=BatchSummary.from_batch(batch),
        )
