"""
Report Generator - Format results for humans and for download.

Produces console output, the missing-values CSV and the cleaned catalog
workbook.
"""

import csv
import io
from datetime import datetime
from pathlib import PurePath
from typing import BinaryIO, Optional

from .codec import encode_table
from .config import Config, default_config
from .models import ConsolidatedBatch, OutcomeStatus, ReconciliationResult, Table

STATUS_LABELS = {
    OutcomeStatus.PENDING: "PENDING",
    OutcomeStatus.OK: "OK",
    OutcomeStatus.DECODE_ERROR: "UNREADABLE",
    OutcomeStatus.SCHEMA_MISMATCH: "COLUMNS DIFFER",
}


def format_batch_status(batch: ConsolidatedBatch) -> str:
    """
    Per-file status of an order-line batch.

    Every file is listed, failed ones with their full error message.
    """
    if not batch.outcomes:
        return "No order-line files selected.\n"

    lines = [f"ORDER LINES ({batch.file_count} files)", "-" * 70]
    for i, outcome in enumerate(batch.outcomes, 1):
        status = STATUS_LABELS[outcome.status]
        rows = f"{outcome.row_count} rows" if outcome.table is not None else ""
        lines.append(f"{i:>3}. {outcome.name[:40]:<40} {status:<15} {rows}")
        if outcome.error:
            lines.append(f"     {outcome.error}")

    lines.append("-" * 70)
    if batch.valid:
        lines.append(f"Consolidated {len(batch.records)} records")
    else:
        lines.append("Some files have errors. Check the status of each file above.")
    return "\n".join(lines)


def format_console(result: ReconciliationResult) -> str:
    """
    Format a reconciliation result for console display.

    Args:
        result: Sorted result to print

    Returns:
        Formatted string for console output
    """
    lines = []
    if result.is_empty:
        lines.append("Every catalog value appears in the order lines.")
    else:
        lines.append(f"\nCATALOG VALUES NOT FOUND IN ORDERS ({len(result)})")
        lines.append("=" * 70)
        for entry in result:
            lines.append(f"  {entry.display}")

    lines.append("\n" + "=" * 70)
    lines.append("SUMMARY")
    lines.append(f"  Distinct catalog values ({result.catalog_key_column}): {result.catalog_distinct}")
    lines.append(f"  Distinct order values ({result.order_key_column}):   {result.order_distinct}")
    lines.append(f"  Missing from orders:      {len(result)}")
    lines.append("=" * 70)

    return "\n".join(lines)


def export_reconciliation_report(
    result: ReconciliationResult,
    output: Optional[BinaryIO] = None,
    config: Optional[Config] = None,
) -> bytes:
    """
    Export a result as CSV: Key, Label, Display, one row per entry.

    Every value is double-quoted (embedded quotes doubled). Encoded as
    UTF-8 with BOM so spreadsheet apps pick up accents. An empty result
    still yields the header row.

    Args:
        result: Reconciliation result to export
        output: Optional binary file handle to write to
        config: Header names (defaults to the packaged config)

    Returns:
        CSV bytes (also written to output if provided)
    """
    config = config or default_config()
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)

    writer.writerow(config.report.headers)
    for entry in result:
        writer.writerow([entry.key, entry.label, entry.display])

    content = buffer.getvalue().encode("utf-8-sig")
    if output is not None:
        output.write(content)
    return content


def suggest_clean_filename(original_file_name: str, config: Optional[Config] = None) -> str:
    """
    Download name for a cleaned catalog.

    "catalogo.xls" -> "catalogo_limpio.xls"; unknown or missing
    extensions fall back to the default (".xlsx").
    """
    config = config or default_config()
    path = PurePath(original_file_name or "catalogo")
    ext = path.suffix.lower()
    if ext not in config.export.recognized_extensions:
        ext = config.export.default_extension
    stem = path.stem if path.suffix else path.name
    return f"{stem}{config.export.suffix}{ext}"


def export_clean_table(
    table: Table,
    original_file_name: str,
    config: Optional[Config] = None,
) -> tuple[bytes, str]:
    """
    Encode a cleaned catalog as a workbook.

    Returns:
        (workbook bytes, suggested file name)
    """
    config = config or default_config()
    content = encode_table(table, config.export.sheet_title)
    return content, suggest_clean_filename(original_file_name, config)


def generate_report_filename(prefix: str = "valores_faltantes", extension: str = "csv") -> str:
    """
    Generate a dated filename for a report.

    Returns:
        Filename like "valores_faltantes_2026-01-08.csv"
    """
    date_str = datetime.now().strftime("%Y-%m-%d")
    return f"{prefix}_{date_str}.{extension}"
