"""Integration tests for the product catalog use cases.

Uses the in-memory fake store. No file I/O.
"""

import pytest

from cafe.application.dto import OrderLineSpec
from cafe.application.order_service import OrderService
from cafe.application.product_service import ProductService
from cafe.domain.exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.document_store import PRODUCTS, STOCK_MOVEMENTS
from cafe.domain.service.stock_service import StockService
from tests.fakes import FakeDocumentStore


def _setup() -> tuple[ProductService, StockService, FakeDocumentStore]:
    store = FakeDocumentStore()
    stock = StockService(store)
    return ProductService(store, stock, default_threshold=5), stock, store


def _add_espresso(svc: ProductService, quantity: int = 100):
    return svc.create("Espresso", "Hot drinks", "2.50", "0.80", quantity=quantity, threshold=10)


class TestCreateProduct:

    def test_opening_stock_is_a_ledger_entry(self):
        svc, stock, _ = _setup()
        product = _add_espresso(svc)

        assert product.id == 1
        assert product.quantity == 100
        history = stock.history(product.id)
        assert [(m.delta, m.reason) for m in history] == [(100, "Opening stock")]

    def test_zero_quantity_writes_no_movement(self):
        svc, _, store = _setup()
        svc.create("Croissant", "Pastries", "1.80", "0.60")
        assert store.count(STOCK_MOVEMENTS) == 0

    def test_default_threshold_applies(self):
        svc, _, _ = _setup()
        product = svc.create("Croissant", "Pastries", "1.80", "0.60")
        assert product.threshold == 5

    def test_invalid_product_writes_nothing(self):
        svc, _, store = _setup()
        with pytest.raises(ValidationError, match="cannot be negative"):
            svc.create("Espresso", "Hot drinks", "-1", "0.80")
        assert store.count(PRODUCTS) == 0

    def test_failed_opening_movement_removes_product(self):
        svc, _, store = _setup()
        store.fail_inserts.add(STOCK_MOVEMENTS)
        with pytest.raises(StoreError):
            _add_espresso(svc)
        assert store.count(PRODUCTS) == 0


class TestUpdateProduct:

    def test_quantity_edit_goes_through_the_ledger(self):
        svc, stock, _ = _setup()
        product = _add_espresso(svc)

        updated = svc.update(product.id, quantity=80, price="2.70")

        assert updated.quantity == 80
        assert updated.price == Money.of("2.70")
        assert stock.history(product.id)[0].delta == -20
        assert stock.history(product.id)[0].reason == "Product edit"
        assert stock.balance(product.id) == 80

    def test_edit_without_quantity_change_writes_no_movement(self):
        svc, _, store = _setup()
        product = _add_espresso(svc)
        svc.update(product.id, name="Double Espresso")
        assert store.count(STOCK_MOVEMENTS) == 1

    def test_unknown_product(self):
        svc, _, _ = _setup()
        with pytest.raises(NotFoundError, match="Product #7 not found"):
            svc.update(7, price="1.00")

    def test_failed_ledger_write_keeps_all_fields(self):
        svc, stock, store = _setup()
        product = _add_espresso(svc, quantity=10)
        store.fail_inserts.add(STOCK_MOVEMENTS)

        with pytest.raises(StoreError):
            svc.update(product.id, price="9.99", name="Ristretto", quantity=20)

        reloaded = svc.get(product.id)
        assert reloaded.name == "Espresso"
        assert reloaded.price == Money.of("2.50")
        assert reloaded.quantity == 10
        assert stock.balance(product.id) == 10


class TestDeleteProduct:

    def test_stock_is_written_off(self):
        svc, stock, store = _setup()
        product = _add_espresso(svc, quantity=12)

        svc.delete(product.id)

        assert store.get_by_id(PRODUCTS, product.id) is None
        assert stock.history(product.id)[0].reason == "Deletion"
        assert stock.balance(product.id) == 0

    def test_referenced_product_cannot_be_deleted(self):
        svc, _, store = _setup()
        product = _add_espresso(svc)
        OrderService(store).create("Alice", [OrderLineSpec(product.id, 2)])

        with pytest.raises(ConflictError, match="used in orders"):
            svc.delete(product.id)
        assert svc.get(product.id).quantity == 100

    def test_missing_product(self):
        svc, _, _ = _setup()
        with pytest.raises(NotFoundError):
            svc.delete(3)

    def test_failed_removal_reverts_the_write_off(self):
        svc, stock, store = _setup()
        product = _add_espresso(svc, quantity=12)
        store.fail_deletes.add(PRODUCTS)

        with pytest.raises(StoreError):
            svc.delete(product.id)

        assert svc.get(product.id).quantity == 12
        assert [m.reason for m in stock.history(product.id)] == ["Opening stock"]
        assert stock.balance(product.id) == 12


class TestSearch:

    def _catalog(self) -> ProductService:
        svc, _, _ = _setup()
        _add_espresso(svc)
        svc.create("Croissant", "Pastries", "1.80", "0.60", quantity=0, description="Butter")
        svc.create("Pain au chocolat", "Pastries", "2.00", "0.70", quantity=4)
        svc.create("Orange juice", "Cold drinks", "3.50", "1.20", quantity=30)
        return svc

    def test_list_is_sorted_by_name(self):
        names = [p.name for p in self._catalog().list_all()]
        assert names == ["Croissant", "Espresso", "Orange juice", "Pain au chocolat"]

    def test_by_category(self):
        found = self._catalog().search(category="Pastries")
        assert [p.name for p in found] == ["Croissant", "Pain au chocolat"]

    def test_out_of_stock(self):
        assert [p.name for p in self._catalog().search(stock_level="out")] == ["Croissant"]

    def test_low_stock_excludes_empty_products(self):
        assert [p.name for p in self._catalog().search(stock_level="low")] == ["Pain au chocolat"]

    def test_term_matches_description(self):
        assert [p.name for p in self._catalog().search(term="butter")] == ["Croissant"]

    def test_unknown_stock_level(self):
        with pytest.raises(ValidationError, match="Unknown stock level"):
            self._catalog().search(stock_level="plenty")

    def test_low_stock_report_is_emptiest_first(self):
        names = [p.name for p in self._catalog().low_stock()]
        assert names == ["Croissant", "Pain au chocolat"]

    def test_find_by_name_ignores_case(self):
        assert self._catalog().find_by_name("espresso").price == Money.of("2.50")
        assert self._catalog().find_by_name("Latte") is None
