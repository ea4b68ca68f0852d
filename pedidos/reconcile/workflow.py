"""
Workflow context - the state of one reconciliation session.

Every step returns a new WorkflowContext instead of mutating shared
state, so callers (CLI, API handlers, tests) can hold on to any
intermediate snapshot.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from .cleaner import filter_out, removal_keys
from .config import Config, default_config
from .consolidate import ingest_batch, ingest_single
from .errors import PreconditionError
from .models import ConsolidatedBatch, ReconciliationResult, Table
from .reconciler import reconcile
from .report import export_clean_table, export_reconciliation_report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowContext:
    """Catalog, order-line batch, column selection and last result."""
    catalog: Optional[Table] = None
    catalog_name: str = ""
    orders: ConsolidatedBatch = field(default_factory=ConsolidatedBatch)
    catalog_key_column: str = ""
    order_key_column: str = ""
    result: Optional[ReconciliationResult] = None
    config: Config = field(default_factory=default_config)

    def with_catalog(self, content: bytes, name: str = "") -> "WorkflowContext":
        """Load a new catalog. Raises DecodeError if the file is unreadable."""
        table = ingest_single(content, name)
        column = self.catalog_key_column if table.has_column(self.catalog_key_column) else ""
        return replace(self, catalog=table, catalog_name=name, catalog_key_column=column, result=None)

    def with_orders(self, files: Iterable[tuple[str, bytes]]) -> "WorkflowContext":
        """Replace the order-line batch with a fresh consolidation of `files`."""
        batch = ingest_batch(files)
        return self.with_batch(batch)

    def with_batch(self, batch: ConsolidatedBatch) -> "WorkflowContext":
        column = self.order_key_column if self.order_key_column in batch.columns else ""
        return replace(self, orders=batch, order_key_column=column, result=None)

    def with_selection(self, catalog_key_column: str, order_key_column: str) -> "WorkflowContext":
        return replace(
            self,
            catalog_key_column=catalog_key_column,
            order_key_column=order_key_column,
            result=None,
        )

    def cleared_orders(self) -> "WorkflowContext":
        return replace(self, orders=ConsolidatedBatch(), order_key_column="", result=None)

    def cleared_comparison(self) -> "WorkflowContext":
        return replace(self, catalog_key_column="", order_key_column="", result=None)

    def reconciled(self, allow_partial: bool = False) -> "WorkflowContext":
        """
        Run the comparison for the current selection.

        Raises:
            PreconditionError: nothing loaded, no selection, or an order
                batch with errors (unless allow_partial)
        """
        orders = self.orders.usable_table(allow_partial=allow_partial)
        catalog = self.catalog if self.catalog is not None else Table()
        result = reconcile(
            catalog,
            orders,
            self.catalog_key_column,
            self.order_key_column,
            config=self.config,
        )
        if result.is_empty:
            logger.info("Every catalog value appears in the order lines; nothing to remove")
        return replace(self, result=result)

    def _require_result(self) -> ReconciliationResult:
        if self.result is None or self.catalog is None:
            raise PreconditionError("Run the comparison before exporting")
        return self.result

    def report_csv(self) -> bytes:
        """Missing-values report for the last result."""
        return export_reconciliation_report(self._require_result(), config=self.config)

    def cleaned_catalog(self) -> Table:
        """Catalog without the rows whose key is missing from the orders."""
        result = self._require_result()
        return filter_out(self.catalog, result.catalog_key_column, removal_keys(result))

    def clean_export(self) -> tuple[bytes, str]:
        """Cleaned catalog as workbook bytes plus suggested file name."""
        return export_clean_table(self.cleaned_catalog(), self.catalog_name, config=self.config)
