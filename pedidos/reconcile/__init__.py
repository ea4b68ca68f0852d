# Catalog / order-line reconciliation
# Siloed module - no imports from the API layer

from .models import (
    Table,
    RawFile,
    FileIngestOutcome,
    OutcomeStatus,
    ConsolidatedBatch,
    ReconciliationEntry,
    ReconciliationResult,
    SchemaCheck,
)
from .errors import ReconcileError, DecodeError, SchemaMismatchError, PreconditionError
from .config import load_config, default_config, Config
from .codec import decode_sheet, decode_table, encode_table
from .schema import validate_columns
from .normalizer import normalize_row, normalize_key
from .consolidate import (
    ConsolidationAccumulator,
    consolidate,
    ingest_single,
    ingest_batch,
    ingest_batch_async,
)
from .reconciler import reconcile
from .cleaner import filter_out, removal_keys
from .report import (
    format_console,
    format_batch_status,
    export_reconciliation_report,
    export_clean_table,
)
from .workflow import WorkflowContext

__version__ = "1.0.0"

__all__ = [
    # Models
    "Table",
    "RawFile",
    "FileIngestOutcome",
    "OutcomeStatus",
    "ConsolidatedBatch",
    "ReconciliationEntry",
    "ReconciliationResult",
    "SchemaCheck",
    # Errors
    "ReconcileError",
    "DecodeError",
    "SchemaMismatchError",
    "PreconditionError",
    # Config
    "Config",
    "load_config",
    "default_config",
    # Codec
    "decode_sheet",
    "decode_table",
    "encode_table",
    # Validation / normalization
    "validate_columns",
    "normalize_row",
    "normalize_key",
    # Consolidation
    "ConsolidationAccumulator",
    "consolidate",
    "ingest_single",
    "ingest_batch",
    "ingest_batch_async",
    # Reconciliation
    "reconcile",
    "filter_out",
    "removal_keys",
    # Report
    "format_console",
    "format_batch_status",
    "export_reconciliation_report",
    "export_clean_table",
    # Workflow
    "WorkflowContext",
]
