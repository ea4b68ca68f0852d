"""
Tests for the workflow context.

Run with: pytest pedidos/reconcile/tests/test_workflow.py -v
"""

import pytest

from pedidos.reconcile.codec import decode_table
from pedidos.reconcile.errors import DecodeError, PreconditionError
from pedidos.reconcile.workflow import WorkflowContext


@pytest.fixture
def loaded(catalog_bytes, orders_file_a, orders_file_b):
    return (
        WorkflowContext()
        .with_catalog(catalog_bytes, "catalogo.xlsx")
        .with_orders([("a.xlsx", orders_file_a), ("b.xlsx", orders_file_b)])
        .with_selection("codigo", "codigo")
    )


class TestTransitions:

    def test_steps_return_new_contexts(self, catalog_bytes):
        empty = WorkflowContext()
        with_catalog = empty.with_catalog(catalog_bytes, "catalogo.xlsx")
        assert empty.catalog is None
        assert with_catalog.catalog is not None
        assert with_catalog.catalog_name == "catalogo.xlsx"

    def test_unreadable_catalog(self):
        with pytest.raises(DecodeError):
            WorkflowContext().with_catalog(b"junk", "catalogo.xlsx")

    def test_new_orders_reset_result(self, loaded, orders_file_a):
        done = loaded.reconciled()
        assert done.result is not None
        reloaded = done.with_orders([("a.xlsx", orders_file_a)])
        assert reloaded.result is None
        # Column still exists in the new batch, selection kept
        assert reloaded.order_key_column == "codigo"

    def test_selection_dropped_when_column_disappears(self, loaded, xlsx):
        other = xlsx([["sku"], ["A1"]])
        reloaded = loaded.with_orders([("otro.xlsx", other)])
        assert reloaded.order_key_column == ""

    def test_cleared_orders(self, loaded):
        cleared = loaded.cleared_orders()
        assert cleared.orders.outcomes == ()
        assert cleared.order_key_column == ""
        assert cleared.catalog is loaded.catalog

    def test_cleared_comparison(self, loaded):
        cleared = loaded.reconciled().cleared_comparison()
        assert cleared.result is None
        assert cleared.catalog_key_column == ""


class TestReconcile:

    def test_result(self, loaded):
        done = loaded.reconciled()
        assert [e.display for e in done.result] == ["B2 - Jeringa 5ml", "C3 - Sin nombre"]

    def test_cleaned_catalog(self, loaded):
        cleaned = loaded.reconciled().cleaned_catalog()
        assert [r["nombre"] for r in cleaned.records] == ["Gasas esteriles", "Sin codigo", "Bisturi"]
        assert cleaned.columns == ("codigo", "nombre", "precio")

    def test_clean_export(self, loaded):
        content, name = loaded.reconciled().clean_export()
        assert name == "catalogo_limpio.xlsx"
        assert decode_table(content).row_count == 3

    def test_report_csv(self, loaded):
        text = loaded.reconciled().report_csv().decode("utf-8-sig")
        assert '"B2","Jeringa 5ml","B2 - Jeringa 5ml"' in text

    def test_invalid_batch_refused(self, loaded, orders_file_a, orders_file_mismatch):
        bad = loaded.with_orders([("a.xlsx", orders_file_a), ("m.xlsx", orders_file_mismatch)])
        bad = bad.with_selection("codigo", "codigo")
        with pytest.raises(PreconditionError, match="m.xlsx"):
            bad.reconciled()

    def test_invalid_batch_allow_partial(self, loaded, orders_file_a, orders_file_mismatch):
        bad = loaded.with_orders([("a.xlsx", orders_file_a), ("m.xlsx", orders_file_mismatch)])
        done = bad.with_selection("codigo", "codigo").reconciled(allow_partial=True)
        assert done.result.keys == ["B2", "C3"]

    def test_nothing_loaded(self):
        with pytest.raises(PreconditionError):
            WorkflowContext().with_selection("codigo", "codigo").reconciled()

    def test_export_before_reconcile(self, loaded):
        with pytest.raises(PreconditionError, match="Run the comparison"):
            loaded.report_csv()
        with pytest.raises(PreconditionError):
            loaded.cleaned_catalog()

    def test_empty_result_still_exports(self, catalog_bytes, xlsx):
        everything = xlsx([["codigo"], ["A1"], ["B2"], ["C3"], ["D4"]])
        done = (
            WorkflowContext()
            .with_catalog(catalog_bytes, "catalogo.xls")
            .with_orders([("todo.xlsx", everything)])
            .with_selection("codigo", "codigo")
            .reconciled()
        )
        assert done.result.is_empty
        assert done.cleaned_catalog() == done.catalog
        content, name = done.clean_export()
        assert name == "catalogo_limpio.xls"
        assert done.report_csv().decode("utf-8-sig").strip() == '"Key","Label","Display"'
