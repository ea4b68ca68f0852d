"""
Row Normalizer - Turn positional sheet rows into keyed records.

Also home of the key normalization used for every comparison:
cell -> text, trimmed, lowercased.
"""

from datetime import date, datetime, time
from typing import Any, Iterable, Sequence


def is_blank(value: Any) -> bool:
    """True for cells that count as empty (None or empty string)."""
    return value is None or value == ""


def normalize_row(header_row: Sequence[str], data_row: Sequence[Any]) -> dict[str, Any]:
    """
    Map a positional row onto the header.

    Missing trailing cells and falsy cells (None, "", 0, False) become "".
    Cells beyond the header width are dropped.
    """
    record = {}
    for index, column in enumerate(header_row):
        value = data_row[index] if index < len(data_row) else None
        record[column] = value if value else ""
    return record


def normalize_rows(
    header_row: Sequence[str],
    data_rows: Iterable[Sequence[Any]],
) -> list[dict[str, Any]]:
    """Normalize every data row against the same header."""
    return [normalize_row(header_row, row) for row in data_rows]


def cell_to_text(value: Any) -> str:
    """
    Render a cell as text the way a spreadsheet shows it.

    Integral floats drop the trailing ".0" (12345.0 -> "12345") so numeric
    codes read from xlsx compare equal to the same code typed as text.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def normalize_key(value: Any) -> str:
    """Comparison form of a cell: text, trimmed, lowercased."""
    return cell_to_text(value).strip().lower()
