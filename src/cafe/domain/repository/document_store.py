"""Abstract document store.

Defined in the domain layer so services never depend on a storage engine.
Concrete implementations (JSON files, in-memory) live elsewhere.

Records are plain dicts keyed by an auto-assigned positive integer ``id``.
The store stamps ``created_at`` and ``updated_at`` on every write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from cafe.domain import query

PRODUCTS = "products"
ORDERS = "orders"
INVOICES = "invoices"
STOCK_MOVEMENTS = "stock_movements"

# Advisory secondary indexes, created with the collections. Filtering beyond
# lookup by id is always done by the query engine over a full scan.
COLLECTION_INDEXES: dict[str, tuple[str, ...]] = {
    PRODUCTS: ("name", "category", "quantity"),
    ORDERS: ("date", "client_name", "status"),
    INVOICES: ("date", "client_name", "status", "order_id"),
    STOCK_MOVEMENTS: ("timestamp", "product_id", "reason"),
}

PROTECTED_FIELDS = frozenset({"id", "created_at"})


class DocumentStore(ABC):

    @abstractmethod
    def init(self) -> None:
        """Open the store and create missing collections. Idempotent."""

    @abstractmethod
    def close(self) -> None:
        """Release the store. A later call re-opens it through ``init()``."""

    @abstractmethod
    def insert(self, collection: str, record: dict[str, Any]) -> int:
        """Persist a copy of ``record`` under a new id and return the id."""

    @abstractmethod
    def update(self, collection: str, record_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merge ``fields`` into a record and return the merged record.

        Raises NotFoundError if no record has ``record_id``.
        """

    @abstractmethod
    def delete(self, collection: str, record_id: int) -> bool:
        """Remove a record. Deleting a missing id is a successful no-op."""

    @abstractmethod
    def get_by_id(self, collection: str, record_id: int) -> dict[str, Any] | None:
        """Return a record by id, or None."""

    @abstractmethod
    def get_all(self, collection: str) -> list[dict[str, Any]]:
        """Return every record of a collection."""

    @abstractmethod
    def clear(self, collection: str) -> bool:
        """Remove every record of a collection."""

    @abstractmethod
    def indexes(self, collection: str) -> tuple[str, ...]:
        """Return the advisory index fields of a collection."""

    # --- Queries (full scan + query engine) -----------------------------------

    def find(self, collection: str, criteria: query.Criteria | None = None) -> list[dict[str, Any]]:
        return query.find(self.get_all(collection), criteria)  # type: ignore[return-value]

    def count(self, collection: str, criteria: query.Criteria | None = None) -> int:
        return len(self.find(collection, criteria))

    def exists(self, collection: str, criteria: query.Criteria | None = None) -> bool:
        return self.count(collection, criteria) > 0

    # --- Scoped use -----------------------------------------------------------

    def __enter__(self) -> DocumentStore:
        self.init()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
