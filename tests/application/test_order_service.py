"""Integration tests for the order use cases.

Uses the in-memory fake store. No file I/O.
"""

import pytest

from cafe.application.dto import OrderLineSpec
from cafe.application.order_service import OrderService
from cafe.domain.exceptions import NotFoundError, ValidationError
from cafe.domain.model.order import OrderStatus
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.document_store import INVOICES, ORDERS, PRODUCTS
from tests.fakes import FakeDocumentStore


def _setup() -> tuple[OrderService, FakeDocumentStore]:
    """Build the service over a store holding Espresso (#1) and Croissant (#2)."""
    store = FakeDocumentStore()
    store.insert(PRODUCTS, {"name": "Espresso", "category": "Hot drinks", "price": 2.5, "quantity": 100})
    store.insert(PRODUCTS, {"name": "Croissant", "category": "Pastries", "price": 1.8, "quantity": 20})
    return OrderService(store), store


class TestCreateOrder:

    def test_total_from_snapshots(self):
        svc, _ = _setup()
        order = svc.create("Bob", [OrderLineSpec(1, 2), OrderLineSpec(2, 1)], date="2024-03-01")

        assert order.id == 1
        assert order.total == Money.of("6.80")
        assert [line.product_name for line in order.lines] == ["Espresso", "Croissant"]

    def test_persists_recomputed_total(self):
        svc, store = _setup()
        svc.create("Bob", [OrderLineSpec(1, 2), OrderLineSpec(2, 1)])
        assert store.get_by_id(ORDERS, 1)["total"] == 6.8

    def test_price_change_does_not_touch_existing_order(self):
        svc, store = _setup()
        order = svc.create("Bob", [OrderLineSpec(1, 2)])
        store.update(PRODUCTS, 1, {"price": 3.0, "name": "Espresso XL"})

        reloaded = svc.get(order.id)
        assert reloaded.lines[0].unit_price == Money.of("2.50")
        assert reloaded.lines[0].product_name == "Espresso"

    def test_unknown_product(self):
        svc, store = _setup()
        with pytest.raises(NotFoundError, match="Product #9 not found"):
            svc.create("Bob", [OrderLineSpec(9, 1)])
        assert store.count(ORDERS) == 0

    def test_zero_quantity_rejected(self):
        svc, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            svc.create("Bob", [OrderLineSpec(1, 0)])

    def test_empty_order_rejected(self):
        svc, _ = _setup()
        with pytest.raises(ValidationError, match="at least one line"):
            svc.create("Bob", [])


class TestUpdateOrder:

    def test_known_product_keeps_its_snapshot(self):
        svc, store = _setup()
        order = svc.create("Bob", [OrderLineSpec(1, 1)])
        store.update(PRODUCTS, 1, {"price": 3.0})
        store.update(PRODUCTS, 2, {"price": 2.0})

        updated = svc.update(order.id, lines=[OrderLineSpec(1, 3), OrderLineSpec(2, 1)])

        assert updated.lines[0].unit_price == Money.of("2.50")
        assert updated.lines[1].unit_price == Money.of("2.00")
        assert updated.total == Money.of("9.50")

    def test_only_given_fields_change(self):
        svc, _ = _setup()
        order = svc.create("Bob", [OrderLineSpec(1, 1)], notes="No sugar")
        updated = svc.update(order.id, client_name="Robert")
        assert updated.client_name == "Robert"
        assert updated.notes == "No sugar"
        assert updated.total == order.total

    def test_set_status(self):
        svc, _ = _setup()
        order = svc.create("Bob", [OrderLineSpec(1, 1)])
        assert svc.set_status(order.id, "preparing").status == OrderStatus.PREPARING

    def test_blank_client_rejected(self):
        svc, _ = _setup()
        order = svc.create("Bob", [OrderLineSpec(1, 1)])
        with pytest.raises(ValidationError, match="Client name is required"):
            svc.update(order.id, client_name=" ")


class TestOrderQueries:

    def test_list_is_most_recent_first(self):
        svc, _ = _setup()
        svc.create("A", [OrderLineSpec(1, 1)], date="2024-03-01")
        svc.create("B", [OrderLineSpec(1, 1)], date="2024-03-05")
        svc.create("C", [OrderLineSpec(1, 1)], date="2024-02-28")
        assert [o.client_name for o in svc.list_all()] == ["B", "A", "C"]

    def test_on_date(self):
        svc, _ = _setup()
        svc.create("A", [OrderLineSpec(1, 1)], date="2024-03-01")
        svc.create("B", [OrderLineSpec(1, 1)], date="2024-03-05")
        assert [o.client_name for o in svc.on_date("2024-03-05")] == ["B"]

    def test_billable_excludes_invoiced_and_open_orders(self):
        svc, store = _setup()
        svc.create("A", [OrderLineSpec(1, 1)], status="Done")
        svc.create("B", [OrderLineSpec(1, 1)], status="Delivered")
        svc.create("C", [OrderLineSpec(1, 1)], status="Pending")
        store.insert(INVOICES, {"order_id": 1, "client_name": "A", "status": "Pending"})

        assert [o.client_name for o in svc.billable()] == ["B"]

    def test_delete(self):
        svc, store = _setup()
        order = svc.create("A", [OrderLineSpec(1, 1)])
        svc.delete(order.id)
        assert store.count(ORDERS) == 0
        with pytest.raises(NotFoundError):
            svc.delete(order.id)
