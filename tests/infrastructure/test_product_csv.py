"""Tests for CSV export and import of the catalog."""

import io

import pytest

from cafe.application.product_service import ProductService
from cafe.domain.exceptions import ValidationError
from cafe.domain.model.value_objects import Money
from cafe.domain.service.stock_service import StockService
from cafe.infrastructure.product_csv import export_products, import_products
from tests.fakes import FakeDocumentStore

HEADER_LINE = "ID,Name,Category,Price,Cost,Stock,Threshold,Description\n"


def _service() -> tuple[ProductService, StockService]:
    store = FakeDocumentStore()
    stock = StockService(store)
    return ProductService(store, stock), stock


class TestExport:

    def test_writes_header_and_rows(self):
        svc, _ = _service()
        svc.create("Espresso", "Hot drinks", "2.5", "0.8", quantity=100, threshold=20, description="Strong, dark")
        out = io.StringIO()

        count = export_products(svc.list_all(), out)

        assert count == 1
        assert out.getvalue() == HEADER_LINE + '1,Espresso,Hot drinks,2.50,0.80,100,20,"Strong, dark"\n'


class TestImport:

    def test_creates_new_products_with_opening_stock(self):
        svc, stock = _service()
        source = io.StringIO(HEADER_LINE + ",Croissant,Pastries,1.80,0.60,25,5,Butter\n")

        result = import_products(svc, source)

        assert (result.created, result.updated, result.skipped) == (1, 0, 0)
        croissant = svc.find_by_name("Croissant")
        assert croissant.quantity == 25
        assert stock.balance(croissant.id) == 25

    def test_updates_existing_products_by_name(self):
        svc, stock = _service()
        espresso = svc.create("Espresso", "Hot drinks", "2.50", "0.80", quantity=100)
        source = io.StringIO(HEADER_LINE + "99,espresso,Hot drinks,2.70,0.80,90,20,\n")

        result = import_products(svc, source)

        assert result.updated == 1
        reloaded = svc.get(espresso.id)
        assert reloaded.price == Money.of("2.70")
        assert reloaded.quantity == 90
        assert stock.balance(espresso.id) == 90

    def test_short_rows_are_skipped(self):
        svc, _ = _service()
        source = io.StringIO(HEADER_LINE + ",Cookie,Snacks,1.20\n\n,Croissant,Pastries,1.80,0.60,25,5,\n")
        result = import_products(svc, source)
        assert (result.created, result.skipped) == (1, 1)

    def test_bad_row_aborts_the_whole_import(self):
        svc, _ = _service()
        source = io.StringIO(
            HEADER_LINE
            + ",Croissant,Pastries,1.80,0.60,25,5,\n"
            + ",Cookie,Snacks,abc,0.30,10,2,\n"
        )
        with pytest.raises(ValidationError, match="Line 3"):
            import_products(svc, source)
        assert svc.list_all() == []

    def test_empty_file(self):
        svc, _ = _service()
        with pytest.raises(ValidationError, match="empty or has no data rows"):
            import_products(svc, io.StringIO(HEADER_LINE))

    def test_missing_header_column(self):
        svc, _ = _service()
        source = io.StringIO("Name,Price\nEspresso,2.50\n")
        with pytest.raises(ValidationError, match="header is missing: ID, Category"):
            import_products(svc, source)
