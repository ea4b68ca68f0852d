"""
Clean Table Generator - Drop catalog rows flagged by a reconciliation.
"""

import logging
from typing import Iterable

from .models import ReconciliationEntry, Table
from .normalizer import is_blank, normalize_key

logger = logging.getLogger(__name__)


def removal_keys(entries: Iterable[ReconciliationEntry]) -> set[str]:
    """Normalized keys of a reconciliation result, ready for `filter_out`."""
    return {normalize_key(e.key) for e in entries}


def filter_out(catalog: Table, catalog_key_column: str, keys: set[str]) -> Table:
    """
    Stable filter of the catalog.

    A row is kept when its key cell is empty or its normalized key is not
    in `keys`. Columns and row order are unchanged; the input is not touched.
    """
    kept = [
        record for record in catalog.records
        if is_blank(record.get(catalog_key_column))
        or normalize_key(record.get(catalog_key_column)) not in keys
    ]

    removed = catalog.row_count - len(kept)
    if not keys:
        logger.info("No removal keys given, catalog returned unchanged")
    else:
        logger.info(f"Removed {removed} of {catalog.row_count} catalog rows")

    return Table(columns=catalog.columns, records=tuple(kept))
