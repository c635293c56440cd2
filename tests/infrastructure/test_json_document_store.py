"""Tests for the JSON-file document store, against a temporary directory."""

import json

import pytest

from cafe.domain.exceptions import NotFoundError, StoreError
from cafe.domain.repository.document_store import INVOICES, ORDERS, PRODUCTS, STOCK_MOVEMENTS
from cafe.infrastructure.persistence.json_document_store import JsonDocumentStore


@pytest.fixture
def store(tmp_path):
    with JsonDocumentStore(tmp_path, "test_db") as opened:
        yield opened


class TestLifecycle:

    def test_init_creates_one_file_per_collection(self, tmp_path):
        store = JsonDocumentStore(tmp_path, "test_db")
        store.init()
        files = sorted(p.name for p in (tmp_path / "test_db").iterdir())
        assert files == ["invoices.json", "orders.json", "products.json", "stock_movements.json"]

    def test_init_is_idempotent(self, tmp_path):
        store = JsonDocumentStore(tmp_path, "test_db")
        store.init()
        store.insert(PRODUCTS, {"name": "Espresso"})
        store.init()
        JsonDocumentStore(tmp_path, "test_db").init()
        assert store.count(PRODUCTS) == 1

    def test_context_manager_closes(self, tmp_path):
        with JsonDocumentStore(tmp_path) as store:
            assert store.is_open
        assert not store.is_open

    def test_operations_open_the_store_lazily(self, tmp_path):
        store = JsonDocumentStore(tmp_path, "test_db")
        assert store.get_all(ORDERS) == []
        assert store.is_open

    def test_indexes_are_created_with_the_collections(self, store):
        assert store.indexes(PRODUCTS) == ("name", "category", "quantity")
        assert store.indexes(STOCK_MOVEMENTS) == ("timestamp", "product_id", "reason")
        assert "order_id" in store.indexes(INVOICES)

    def test_data_survives_reopen(self, tmp_path):
        with JsonDocumentStore(tmp_path, "test_db") as first:
            first.insert(PRODUCTS, {"name": "Espresso", "price": 2.5})
        with JsonDocumentStore(tmp_path, "test_db") as second:
            assert second.get_by_id(PRODUCTS, 1)["price"] == 2.5


class TestInsert:

    def test_assigns_increasing_ids_and_timestamps(self, store):
        first = store.insert(PRODUCTS, {"name": "Espresso"})
        second = store.insert(PRODUCTS, {"name": "Croissant"})
        assert (first, second) == (1, 2)

        raw = store.get_by_id(PRODUCTS, second)
        assert raw["name"] == "Croissant"
        assert raw["created_at"] == raw["updated_at"]

    def test_caller_id_is_ignored(self, store):
        new_id = store.insert(PRODUCTS, {"id": 42, "name": "Espresso"})
        assert new_id == 1
        assert store.get_by_id(PRODUCTS, 42) is None

    def test_ids_are_not_reused_after_delete(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        store.insert(PRODUCTS, {"name": "Croissant"})
        store.delete(PRODUCTS, 2)
        assert store.insert(PRODUCTS, {"name": "Cookie"}) == 3

    def test_collections_have_their_own_sequence(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        assert store.insert(ORDERS, {"client_name": "Alice"}) == 1

    def test_caller_dict_is_not_aliased(self, store):
        record = {"name": "Espresso", "lines": [1]}
        store.insert(PRODUCTS, record)
        record["lines"].append(2)
        assert store.get_by_id(PRODUCTS, 1)["lines"] == [1]

    def test_unserialisable_record_leaves_file_untouched(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        with pytest.raises(StoreError, match="aborted"):
            store.insert(PRODUCTS, {"name": object()})
        assert store.count(PRODUCTS) == 1
        assert store.insert(PRODUCTS, {"name": "Croissant"}) == 2


class TestUpdate:

    def test_merges_fields(self, store):
        store.insert(PRODUCTS, {"name": "Espresso", "price": 2.5, "quantity": 10})
        merged = store.update(PRODUCTS, 1, {"quantity": 8})
        assert merged["quantity"] == 8
        assert merged["price"] == 2.5
        assert store.get_by_id(PRODUCTS, 1)["quantity"] == 8

    def test_empty_update_only_touches_updated_at(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        before = store.get_by_id(PRODUCTS, 1)
        after = store.update(PRODUCTS, 1, {})
        assert {k: v for k, v in after.items() if k != "updated_at"} == {
            k: v for k, v in before.items() if k != "updated_at"
        }
        assert after["updated_at"] >= before["updated_at"]

    def test_id_and_created_at_are_protected(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        created = store.get_by_id(PRODUCTS, 1)["created_at"]
        store.update(PRODUCTS, 1, {"id": 9, "created_at": "never"})
        raw = store.get_by_id(PRODUCTS, 1)
        assert raw["id"] == 1
        assert raw["created_at"] == created

    def test_missing_record(self, store):
        with pytest.raises(NotFoundError, match="#5"):
            store.update(PRODUCTS, 5, {"name": "Ghost"})


class TestDeleteAndClear:

    def test_delete(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        assert store.delete(PRODUCTS, 1) is True
        assert store.get_by_id(PRODUCTS, 1) is None

    def test_delete_missing_id_is_a_no_op(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        assert store.delete(PRODUCTS, 7) is True
        assert store.count(PRODUCTS) == 1

    def test_clear_keeps_the_sequence(self, store):
        store.insert(PRODUCTS, {"name": "Espresso"})
        store.clear(PRODUCTS)
        assert store.get_all(PRODUCTS) == []
        assert store.insert(PRODUCTS, {"name": "Croissant"}) == 2


class TestQueries:

    def test_find_with_operators(self, store):
        for name, qty in [("Espresso", 100), ("Croissant", 0), ("Cookie", 4)]:
            store.insert(PRODUCTS, {"name": name, "quantity": qty})
        found = store.find(PRODUCTS, {"quantity": {"$gt": 0, "$lt": 50}})
        assert [r["name"] for r in found] == ["Cookie"]
        assert store.exists(PRODUCTS, {"name": "Croissant"})
        assert store.count(PRODUCTS, {"quantity": {"$ne": 0}}) == 2


class TestErrors:

    def test_unknown_collection(self, store):
        with pytest.raises(StoreError, match="Unknown collection 'customers'"):
            store.get_all("customers")

    def test_corrupt_file(self, store):
        (store.root / "orders.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError, match="Cannot read collection 'orders'"):
            store.get_all(ORDERS)

    def test_wrong_shape(self, store):
        (store.root / "orders.json").write_text(json.dumps([1, 2]), encoding="utf-8")
        with pytest.raises(StoreError, match="corrupt"):
            store.get_all(ORDERS)

    @pytest.mark.parametrize("records", [[{"name": "Espresso"}], ["Espresso"]])
    def test_record_without_id(self, store, records):
        payload = {"sequence": 1, "indexes": [], "records": records}
        (store.root / "products.json").write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(StoreError, match="without an id"):
            store.get_by_id(PRODUCTS, 1)
        with pytest.raises(StoreError, match="without an id"):
            store.delete(PRODUCTS, 1)

    def test_deleted_file_is_recreated_empty(self, store):
        store.insert(INVOICES, {"order_id": 1})
        (store.root / "invoices.json").unlink()
        assert store.get_all(INVOICES) == []
        assert store.insert(INVOICES, {"order_id": 2}) == 1
