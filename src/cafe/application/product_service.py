"""Application service: product catalog.

Validation always happens before the first write. Quantities are never
written directly: opening stock, edits and write-offs on delete all go
through the StockService so the ledger stays complete.
"""

from __future__ import annotations

import logging
from typing import Any

from cafe.domain.exceptions import ConflictError, DomainException, NotFoundError, ValidationError
from cafe.domain.model.product import Product
from cafe.domain.model.stock_movement import (
    REASON_DELETION,
    REASON_OPENING,
    REASON_PRODUCT_EDIT,
)
from cafe.domain.repository.document_store import ORDERS, PRODUCTS, DocumentStore
from cafe.domain.service.stock_service import StockService

logger = logging.getLogger(__name__)

STOCK_LEVELS = ("low", "out")


class ProductService:

    def __init__(
        self,
        store: DocumentStore,
        stock: StockService,
        currency: str = "EUR",
        default_threshold: int = 5,
    ) -> None:
        self._store = store
        self._stock = stock
        self._currency = currency
        self._default_threshold = default_threshold

    # --- Commands -------------------------------------------------------------

    def create(
        self,
        name: str,
        category: str,
        price: str | float | int,
        cost: str | float | int,
        quantity: int = 0,
        threshold: int | None = None,
        description: str = "",
    ) -> Product:
        """Add a product; a non-zero opening quantity is recorded in the ledger."""
        product = Product.create(
            name=name,
            category=category,
            price=price,
            cost=cost,
            quantity=quantity,
            threshold=self._default_threshold if threshold is None else threshold,
            description=description,
            currency=self._currency,
        )

        record = product.to_record()
        record["quantity"] = 0
        product_id = self._store.insert(PRODUCTS, record)

        if product.quantity > 0:
            try:
                self._stock.adjust(product_id, product.quantity, REASON_OPENING, "Initial stock")
            except DomainException:
                self._store.delete(PRODUCTS, product_id)
                raise

        logger.info("Product #%s '%s' created", product_id, product.name)
        return self.get(product_id)

    def update(self, product_id: int, **changes: Any) -> Product:
        """Edit product fields. A quantity change becomes a ledger entry.

        The ledger entry is written first; if the other fields cannot be
        saved afterwards, the entry is reverted.
        """
        current = self.get(product_id)
        updated = current.with_changes(**changes)

        fields = updated.to_record()
        new_quantity = fields.pop("quantity")

        movement = None
        if new_quantity != current.quantity:
            movement = self._stock.adjust(
                product_id,
                new_quantity - current.quantity,
                REASON_PRODUCT_EDIT,
                "Quantity edited on product",
            )
        try:
            self._store.update(PRODUCTS, product_id, fields)
        except DomainException:
            if movement is not None:
                self._stock.revert(movement)
            raise
        return self.get(product_id)

    def delete(self, product_id: int) -> None:
        """Remove a product that no order refers to.

        Remaining stock is written off through the ledger first, and the
        write-off is reverted if the product cannot be removed.
        """
        product = self.get(product_id)
        if self.is_referenced(product_id):
            raise ConflictError(
                f"Product '{product.name}' is used in orders and cannot be deleted"
            )

        movement = None
        if product.quantity > 0:
            movement = self._stock.adjust(product_id, -product.quantity, REASON_DELETION, "Product deleted")
        try:
            self._store.delete(PRODUCTS, product_id)
        except DomainException:
            if movement is not None:
                self._stock.revert(movement)
            raise
        logger.info("Product #%s '%s' deleted", product_id, product.name)

    # --- Queries --------------------------------------------------------------

    def get(self, product_id: int) -> Product:
        raw = self._store.get_by_id(PRODUCTS, product_id)
        if raw is None:
            raise NotFoundError(f"Product #{product_id} not found")
        return Product.from_record(raw, self._currency)

    def list_all(self) -> list[Product]:
        products = [Product.from_record(raw, self._currency) for raw in self._store.get_all(PRODUCTS)]
        return sorted(products, key=lambda p: (p.name.lower(), p.id or 0))

    def find_by_name(self, name: str) -> Product | None:
        wanted = name.strip().lower()
        for product in self.list_all():
            if product.name.lower() == wanted:
                return product
        return None

    def is_referenced(self, product_id: int) -> bool:
        """True if any order line points at the product."""
        return any(
            line.get("product_id") == product_id
            for order in self._store.get_all(ORDERS)
            for line in order.get("lines", [])
        )

    def search(
        self,
        category: str | None = None,
        stock_level: str | None = None,
        term: str | None = None,
    ) -> list[Product]:
        """Filter the catalog.

        Args:
            category: exact category name.
            stock_level: ``"low"`` (in stock but at or under the threshold)
                or ``"out"`` (nothing left).
            term: case-insensitive match on name or description.
        """
        criteria: dict[str, Any] = {}
        if category:
            criteria["category"] = category
        if stock_level == "out":
            criteria["quantity"] = {"$lte": 0}
        elif stock_level == "low":
            criteria["quantity"] = {"$gt": 0}
        elif stock_level:
            raise ValidationError(
                f"Unknown stock level {stock_level!r}, expected one of {', '.join(STOCK_LEVELS)}"
            )

        products = [Product.from_record(raw, self._currency) for raw in self._store.find(PRODUCTS, criteria)]
        if stock_level == "low":
            products = [p for p in products if p.is_low_stock]
        if term:
            needle = term.strip().lower()
            products = [
                p for p in products
                if needle in p.name.lower() or needle in p.description.lower()
            ]
        return sorted(products, key=lambda p: (p.name.lower(), p.id or 0))

    def low_stock(self) -> list[Product]:
        """Products at or under their reorder threshold, emptiest first."""
        products = [p for p in self.list_all() if p.is_low_stock]
        return sorted(products, key=lambda p: (p.quantity, p.name.lower()))
