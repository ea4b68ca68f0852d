"""
Spreadsheet Codec - Read the first sheet of a workbook, write a Table back.

Reading sniffs the content instead of trusting the file name:
- ZIP container (xlsx/xlsm) -> openpyxl
- OLE2 compound file (legacy xls) -> xlrd

Only the first worksheet is read. Its first row is the header row.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any

import xlrd
from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .errors import DecodeError
from .models import Table
from .normalizer import cell_to_text, is_blank, normalize_rows

logger = logging.getLogger(__name__)

XLSX_MAGIC = b"PK\x03\x04"
XLS_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Excel limits sheet titles to 31 characters
MAX_SHEET_TITLE = 31


@dataclass(frozen=True)
class DecodedSheet:
    """Header row plus raw positional data rows of one sheet."""
    header: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]
    sheet_name: str = ""


def decode_sheet(content: bytes) -> DecodedSheet:
    """
    Decode workbook bytes into header + data rows.

    Raises:
        DecodeError: empty input, unknown format, unreadable workbook,
            or a first sheet without a header row
    """
    if not content:
        raise DecodeError("File is empty")

    if content.startswith(XLSX_MAGIC):
        sheet_name, rows = _read_xlsx(content)
    elif content.startswith(XLS_MAGIC):
        sheet_name, rows = _read_xls(content)
    else:
        raise DecodeError("Unsupported file format, expected an Excel workbook (.xlsx or .xls)")

    rows = _strip_trailing_blank_rows(rows)
    if not rows:
        raise DecodeError(f"Sheet '{sheet_name}' is empty, no header row found")

    header = _header_from_row(rows[0])
    if not header:
        raise DecodeError(f"Sheet '{sheet_name}' has an empty header row")

    logger.debug(f"Decoded sheet '{sheet_name}': {len(header)} columns, {len(rows) - 1} data rows")
    return DecodedSheet(header=header, rows=tuple(rows[1:]), sheet_name=sheet_name)


def _read_xlsx(content: bytes) -> tuple[str, list[tuple]]:
    """Read all rows of the first worksheet with openpyxl."""
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise DecodeError(f"Could not open workbook: {e}") from e

    try:
        if not workbook.worksheets:
            raise DecodeError("Workbook has no worksheets")
        sheet = workbook.worksheets[0]
        rows = [tuple(row) for row in sheet.iter_rows(values_only=True)]
        return sheet.title, rows
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Could not read worksheet: {e}") from e
    finally:
        workbook.close()


def _read_xls(content: bytes) -> tuple[str, list[tuple]]:
    """Read all rows of the first sheet of a legacy .xls with xlrd."""
    try:
        book = xlrd.open_workbook(file_contents=content, on_demand=True)
    except Exception as e:
        raise DecodeError(f"Could not open workbook: {e}") from e

    try:
        if book.nsheets == 0:
            raise DecodeError("Workbook has no worksheets")
        sheet = book.sheet_by_index(0)
        rows = [tuple(sheet.row_values(i)) for i in range(sheet.nrows)]
        return sheet.name, rows
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Could not read worksheet: {e}") from e
    finally:
        book.release_resources()


def _strip_trailing_blank_rows(rows: list[tuple]) -> list[tuple]:
    """Drop fully-empty rows at the end of the used range."""
    end = len(rows)
    while end > 0 and all(is_blank(v) for v in rows[end - 1]):
        end -= 1
    return rows[:end]


def _header_from_row(row: tuple) -> tuple[str, ...]:
    """Header cells as text, without the empty cells padding the right edge."""
    cells = list(row)
    while cells and is_blank(cells[-1]):
        cells.pop()
    return tuple(cell_to_text(c) for c in cells)


def decode_table(content: bytes) -> Table:
    """Decode workbook bytes straight into a normalized Table."""
    sheet = decode_sheet(content)
    return Table.build(sheet.header, normalize_rows(sheet.header, sheet.rows))


def encode_table(table: Table, sheet_title: str = "Sheet1") -> bytes:
    """
    Write a Table as a single-sheet xlsx workbook.

    Header in row 1 (bold), records from row 2 in table order.
    Empty-string cells are written as empty cells. Text is always written
    as text, never as a formula, and characters a worksheet cannot hold
    are dropped.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = (sheet_title or "Sheet1")[:MAX_SHEET_TITLE]

    _append_row(ws, table.columns)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for record in table.records:
        _append_row(ws, [record.get(col, "") for col in table.columns])

    # Size columns to the header text, within reason
    for col_idx, column in enumerate(table.columns, 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(len(column) + 4, 12), 50)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _append_row(ws, values) -> None:
    ws.append([_to_cell(v) for v in values])
    for cell in ws[ws.max_row]:
        # openpyxl treats any string starting with "=" as a formula
        if isinstance(cell.value, str) and cell.value.startswith("="):
            cell.data_type = "s"


def _to_cell(value: Any) -> Any:
    if is_blank(value):
        return None
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value) or None
    return value
