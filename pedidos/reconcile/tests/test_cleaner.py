"""
Tests for the clean table generator.

Run with: pytest pedidos/reconcile/tests/test_cleaner.py -v
"""

from pedidos.reconcile.cleaner import filter_out, removal_keys
from pedidos.reconcile.models import ReconciliationEntry, Table


def make_catalog():
    return Table.build(
        ["codigo", "nombre"],
        [
            {"codigo": "A1", "nombre": "Gasas"},
            {"codigo": "B2", "nombre": "Jeringa"},
            {"codigo": "", "nombre": "Sin codigo"},
            {"codigo": " b2", "nombre": "Jeringa bis"},
            {"codigo": "C3", "nombre": "Bisturi"},
        ],
    )


class TestRemovalKeys:

    def test_normalized(self):
        entries = [ReconciliationEntry("B2", "x"), ReconciliationEntry(" Zz ", "y")]
        assert removal_keys(entries) == {"b2", "zz"}

    def test_empty(self):
        assert removal_keys([]) == set()


class TestFilterOut:

    def test_empty_removal_set_is_identity(self):
        catalog = make_catalog()
        cleaned = filter_out(catalog, "codigo", set())
        assert cleaned == catalog
        assert cleaned.records == catalog.records

    def test_removes_matching_rows(self):
        cleaned = filter_out(make_catalog(), "codigo", {"b2"})
        assert [r["nombre"] for r in cleaned.records] == ["Gasas", "Sin codigo", "Bisturi"]

    def test_blank_key_rows_kept(self):
        cleaned = filter_out(make_catalog(), "codigo", {"", "a1", "b2", "c3"})
        assert [r["nombre"] for r in cleaned.records] == ["Sin codigo"]

    def test_columns_unchanged(self):
        cleaned = filter_out(make_catalog(), "codigo", {"a1"})
        assert cleaned.columns == ("codigo", "nombre")

    def test_input_not_mutated(self):
        catalog = make_catalog()
        before = [dict(r) for r in catalog.records]
        filter_out(catalog, "codigo", {"a1", "b2"})
        assert [dict(r) for r in catalog.records] == before
        assert catalog.row_count == 5

    def test_row_order_preserved(self):
        cleaned = filter_out(make_catalog(), "codigo", {"a1"})
        assert [r["codigo"] for r in cleaned.records] == ["B2", "", " b2", "C3"]

    def test_numeric_keys(self):
        catalog = Table.build(["codigo"], [{"codigo": 100}, {"codigo": 200.0}, {"codigo": "300"}])
        cleaned = filter_out(catalog, "codigo", {"200", "300"})
        assert [r["codigo"] for r in cleaned.records] == [100]
