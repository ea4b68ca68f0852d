"""
Reconciliation Engine - Catalog values that never appear in the orders.

Comparison is on normalized keys (text, trimmed, lowercased). Each
missing value is reported once, with the first occurrence's casing and
label, and the result is sorted with a locale-style collation.
"""

import logging
import unicodedata
from typing import Any, Optional

from .config import Config, default_config
from .errors import PreconditionError
from .models import Record, ReconciliationEntry, ReconciliationResult, Table
from .normalizer import cell_to_text, is_blank, normalize_key

logger = logging.getLogger(__name__)


def collation_key(text: str) -> tuple[str, str, str]:
    """
    Sort key approximating locale-aware string comparison.

    Primary: accents and case ignored ("Árbol" sits with "arbol").
    Secondary: case ignored, accents kept.
    Tertiary: lowercase before uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), text.casefold(), text.swapcase())


def resolve_label(record: Record, label_fields: tuple[str, ...], fallback: str) -> str:
    """First non-empty candidate field of the record, trimmed, else the fallback."""
    for field_name in label_fields:
        value = record.get(field_name)
        if is_blank(value):
            continue
        text = cell_to_text(value).strip()
        if text:
            return text
    return fallback


def _check_preconditions(
    catalog: Table,
    orders: Table,
    catalog_key_column: str,
    order_key_column: str,
) -> None:
    if not catalog_key_column or not order_key_column:
        raise PreconditionError("Select a column from each file before comparing")
    if catalog.is_empty or orders.is_empty:
        raise PreconditionError("Load both the catalog and the order lines before comparing")
    if not catalog.has_column(catalog_key_column):
        raise PreconditionError(f"Column '{catalog_key_column}' not found in catalog")
    if not orders.has_column(order_key_column):
        raise PreconditionError(f"Column '{order_key_column}' not found in order lines")


def _distinct_keys(values: list[Any]) -> set[str]:
    return {normalize_key(v) for v in values if not is_blank(v)}


def reconcile(
    catalog: Table,
    orders: Table,
    catalog_key_column: str,
    order_key_column: str,
    config: Optional[Config] = None,
) -> ReconciliationResult:
    """
    Find catalog values absent from the order lines.

    Args:
        catalog: Reference catalog table
        orders: Consolidated order-line table
        catalog_key_column: Column of the catalog holding the code to check
        order_key_column: Column of the orders holding the ordered code
        config: Label lookup settings (defaults to the packaged config)

    Returns:
        ReconciliationResult sorted by key

    Raises:
        PreconditionError: missing column selection, empty table, or
            a column that does not exist
    """
    _check_preconditions(catalog, orders, catalog_key_column, order_key_column)
    config = config or default_config()

    order_keys = _distinct_keys(orders.column_values(order_key_column))
    catalog_keys: set[str] = set()
    emitted: set[str] = set()
    entries: list[ReconciliationEntry] = []

    for record in catalog.records:
        raw = record.get(catalog_key_column)
        if is_blank(raw):
            continue

        norm = normalize_key(raw)
        catalog_keys.add(norm)
        if norm in order_keys or norm in emitted:
            continue

        emitted.add(norm)
        entries.append(ReconciliationEntry(
            key=cell_to_text(raw).strip(),
            label=resolve_label(record, config.label_fields, config.fallback_label),
        ))

    entries.sort(key=lambda e: collation_key(e.key))

    logger.info(
        f"Comparison completed: {len(catalog_keys)} distinct catalog values ({catalog_key_column}), "
        f"{len(order_keys)} distinct order values ({order_key_column}), "
        f"{len(entries)} catalog values not found in orders"
    )

    return ReconciliationResult(
        entries=tuple(entries),
        catalog_key_column=catalog_key_column,
        order_key_column=order_key_column,
        catalog_distinct=len(catalog_keys),
        order_distinct=len(order_keys),
    )
