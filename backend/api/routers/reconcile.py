"""
Reconciliation API router.

Stateless: every request carries its own catalog and order-line files,
so the client keeps the session and the server holds nothing between calls.
"""
import errno
import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from backend.api.models import BatchSummary, ReconcileResponse, TableSummary
from backend.core.config import get_reconcile_config, settings
from pedidos.reconcile import (
    ConsolidatedBatch,
    DecodeError,
    PreconditionError,
    WorkflowContext,
    ingest_batch_async,
)
from pedidos.reconcile.codec import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reconcile"])


class _SizeLimitedUpload:
    """Wraps an UploadFile so oversized files fail like unreadable ones."""

    def __init__(self, upload: UploadFile, limit: int):
        self._upload = upload
        self._limit = limit
        self.filename = upload.filename

    async def read(self) -> bytes:
        content = await self._upload.read(self._limit + 1)
        if len(content) > self._limit:
            raise OSError(errno.EFBIG, f"File exceeds {settings.MAX_UPLOAD_MB} MB")
        return content


def _content_disposition(filename: str) -> str:
    safe = quote(filename, safe="")
    return f"attachment; filename=\"{safe}\"; filename*=UTF-8''{safe}"


async def _read_catalog(upload: UploadFile) -> tuple[bytes, str]:
    content = await upload.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail=f"Catalog exceeds {settings.MAX_UPLOAD_MB} MB")
    return content, upload.filename or "catalogo.xlsx"


async def _read_orders(uploads: List[UploadFile]) -> ConsolidatedBatch:
    sources = [_SizeLimitedUpload(u, settings.max_upload_bytes) for u in uploads]
    return await ingest_batch_async(sources)


async def _run_workflow(
    catalog: UploadFile,
    orders: List[UploadFile],
    catalog_column: str,
    orders_column: str,
    allow_partial: bool,
) -> WorkflowContext:
    """Load both sides, select columns and reconcile; map errors to HTTP."""
    content, name = await _read_catalog(catalog)
    ctx = WorkflowContext(config=get_reconcile_config())

    try:
        ctx = ctx.with_catalog(content, name)
    except DecodeError as e:
        raise HTTPException(status_code=422, detail=f"Could not read catalog: {e}")

    ctx = ctx.with_batch(await _read_orders(orders))
    ctx = ctx.with_selection(catalog_column, orders_column)

    try:
        return ctx.reconciled(allow_partial=allow_partial)
    except PreconditionError as e:
        detail = {"message": str(e)}
        if not ctx.orders.valid:
            detail["orders"] = BatchSummary.from_batch(ctx.orders).model_dump()
        raise HTTPException(status_code=400, detail=detail)


@router.post("/api/catalog/inspect", response_model=TableSummary)
async def inspect_catalog(catalog: UploadFile = File(...)):
    """Read a catalog workbook and return its columns and first rows."""
    content, name = await _read_catalog(catalog)
    ctx = WorkflowContext(config=get_reconcile_config())
    try:
        ctx = ctx.with_catalog(content, name)
    except DecodeError as e:
        raise HTTPException(status_code=422, detail=f"Could not read catalog: {e}")
    return TableSummary.from_table(ctx.catalog, name=name)


@router.post("/api/orders/inspect", response_model=BatchSummary)
async def inspect_orders(orders: List[UploadFile] = File(...)):
    """
    Consolidate order-line workbooks and report each file's status.

    Always 200: a batch with errors is a valid answer, flagged by `valid`.
    """
    batch = await _read_orders(orders)
    return BatchSummary.from_batch(batch)


@router.post("/api/reconcile", response_model=ReconcileResponse)
async def run_reconcile(
    catalog: UploadFile = File(...),
    orders: List[UploadFile] = File(...),
    catalog_column: str = Form(""),
    orders_column: str = Form(""),
    allow_partial: bool = Form(False),
):
    """Catalog values not found in the order lines."""
    ctx = await _run_workflow(catalog, orders, catalog_column, orders_column, allow_partial)
    return ReconcileResponse.build(ctx.result, ctx.orders, ctx.cleaned_catalog().row_count)


@router.post("/api/reconcile/report")
async def download_report(
    catalog: UploadFile = File(...),
    orders: List[UploadFile] = File(...),
    catalog_column: str = Form(""),
    orders_column: str = Form(""),
    allow_partial: bool = Form(False),
):
    """Missing values as CSV (Key, Label, Display)."""
    ctx = await _run_workflow(catalog, orders, catalog_column, orders_column, allow_partial)
    return Response(
        content=ctx.report_csv(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": _content_disposition(ctx.config.report.filename)},
    )


@router.post("/api/reconcile/clean")
async def download_clean_catalog(
    catalog: UploadFile = File(...),
    orders: List[UploadFile] = File(...),
    catalog_column: str = Form(""),
    orders_column: str = Form(""),
    allow_partial: bool = Form(False),
    filename: Optional[str] = Form(None),
):
    """Catalog without the rows whose value is missing from the orders."""
    ctx = await _run_workflow(catalog, orders, catalog_column, orders_column, allow_partial)
    content, suggested = ctx.clean_export()
    logger.info(f"Clean catalog export: {suggested} ({len(ctx.result)} values removed)")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename or suggested)},
    )
