"""
Shared fixtures for the reconciliation tests.

Workbooks are built in memory (openpyxl for xlsx, xlwt for legacy xls)
so every test controls its exact header and rows.
"""

from io import BytesIO

import pytest
import xlwt
from openpyxl import Workbook


def make_xlsx(rows, title="Hoja1", extra_sheets=None) -> bytes:
    """Build an xlsx workbook whose first sheet holds `rows`."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(list(row))
    for name, sheet_rows in (extra_sheets or {}).items():
        extra = wb.create_sheet(name)
        for row in sheet_rows:
            extra.append(list(row))
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def make_xls(rows, title="Hoja1") -> bytes:
    """Build a legacy .xls workbook (BIFF8) whose only sheet holds `rows`."""
    wb = xlwt.Workbook()
    ws = wb.add_sheet(title)
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            if value is not None:
                ws.write(r, c, value)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


ORDER_HEADER = ["pedido", "codigo", "cantidad"]


@pytest.fixture
def xlsx():
    """Workbook builder: xlsx(rows, title=..., extra_sheets=...) -> bytes."""
    return make_xlsx


@pytest.fixture
def xls():
    """Legacy workbook builder: xls(rows, title=...) -> bytes."""
    return make_xls


@pytest.fixture
def catalog_bytes():
    """Catalog with a duplicate code, a blank code and mixed label columns."""
    return make_xlsx([
        ["codigo", "nombre", "precio"],
        ["A1", "Gasas esteriles", 3.5],
        ["B2", "Jeringa 5ml", 0.4],
        ["C3", None, 12],
        ["b2 ", "Jeringa duplicada", 0.4],
        [None, "Sin codigo", 1],
        ["D4", "Bisturi", 2],
    ])


@pytest.fixture
def orders_file_a():
    return make_xlsx([
        ORDER_HEADER,
        ["P-001", "a1", 10],
        ["P-002", "D4", 2],
    ])


@pytest.fixture
def orders_file_b():
    return make_xlsx([
        ORDER_HEADER,
        ["P-003", "A1", 1],
    ])


@pytest.fixture
def orders_file_mismatch():
    """Same columns as ORDER_HEADER, different order."""
    return make_xlsx([
        ["codigo", "pedido", "cantidad"],
        ["B2", "P-004", 5],
    ])
