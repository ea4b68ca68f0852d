"""
Test configuration and fixtures for the reconciliation API test suite.

Provides:
- FastAPI TestClient fixture
- Factory functions for building workbook uploads in memory
"""
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook


# ---------------------------------------------------------------------------
# Workbook factories
# ---------------------------------------------------------------------------

def build_workbook(rows) -> bytes:
    """Serialize `rows` (header first) as an xlsx workbook."""
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def upload(name: str, content: bytes) -> tuple:
    """One multipart file part as TestClient expects it."""
    return (name, content, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")


@pytest.fixture()
def catalog_upload():
    content = build_workbook([
        ["codigo", "nombre"],
        ["A1", "Gasas"],
        ["B2", "Jeringa 5ml"],
        ["C3", None],
        ["D4", "Bisturi"],
    ])
    return ("catalog", upload("catalogo.xls", content))


@pytest.fixture()
def order_uploads():
    first = build_workbook([["pedido", "codigo"], ["P-1", "a1"], ["P-2", " D4 "]])
    second = build_workbook([["pedido", "codigo"], ["P-3", "A1"]])
    return [
        ("orders", upload("enero.xlsx", first)),
        ("orders", upload("febrero.xlsx", second)),
    ]


@pytest.fixture()
def mismatched_upload():
    content = build_workbook([["codigo", "pedido"], ["B2", "P-9"]])
    return ("orders", upload("marzo.xlsx", content))


@pytest.fixture()
def selection():
    return {"catalog_column": "codigo", "orders_column": "codigo"}


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def client():
    """Provide a FastAPI TestClient for the reconciliation app."""
    from backend.api.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def small_upload_limit(monkeypatch):
    """Shrink the per-file upload limit to zero megabytes."""
    from backend.core.config import settings

    monkeypatch.setattr(settings, "MAX_UPLOAD_MB", 0)
    return settings


@pytest.fixture()
def workbook():
    """Workbook factory: workbook(rows) -> xlsx bytes."""
    return build_workbook


@pytest.fixture()
def as_upload():
    """Multipart part factory: as_upload(name, content) -> tuple."""
    return upload
