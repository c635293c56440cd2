"""Domain service: Stock ledger.

This is the only writer of stock movements. Every change of a product's
quantity goes through ``adjust()``, which writes the new quantity and
appends exactly one movement carrying the same delta, so that

    sum(movement.delta for the product) == product.quantity

holds for every product from its creation onwards.

The read-modify-write of the quantity relies on the store serialising
same-collection writes; there is no application-level lock.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from cafe.domain.exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from cafe.domain.model.stock_movement import REASON_RECEPTION, StockMovement
from cafe.domain.repository.document_store import PRODUCTS, STOCK_MOVEMENTS, DocumentStore

logger = logging.getLogger(__name__)


def _whole_number(value: object, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be a whole number, got {value!r}")
    return value


class StockService:

    def __init__(self, store: DocumentStore, actor: str = "Admin") -> None:
        self._store = store
        self._actor = actor

    def adjust(
        self,
        product_id: int,
        delta: int,
        reason: str,
        note: str = "",
        actor: str | None = None,
    ) -> StockMovement:
        """Apply a signed quantity change and record it in the ledger.

        Raises:
            ValidationError: ``delta`` is zero or ``reason`` is empty.
            NotFoundError: the product does not exist.
            ConflictError: the change would take the quantity below zero.
                Nothing is written in that case.
        """
        delta = _whole_number(delta, "Adjustment quantity")
        if delta == 0:
            raise ValidationError("Adjustment quantity must not be zero")
        if not reason or not reason.strip():
            raise ValidationError("Adjustment reason is required")

        product = self._store.get_by_id(PRODUCTS, product_id)
        if product is None:
            raise NotFoundError(f"Product #{product_id} not found")

        current = product.get("quantity", 0)
        new_quantity = current + delta
        if new_quantity < 0:
            raise ConflictError(
                f"Insufficient stock for {product['name']} "
                f"(need {-delta}, have {current})"
            )

        self._store.update(PRODUCTS, product_id, {"quantity": new_quantity})

        movement = StockMovement(
            id=None,
            product_id=product_id,
            product_name=product["name"],
            delta=delta,
            reason=reason.strip(),
            note=(note or "").strip(),
            actor=actor or self._actor,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        try:
            movement_id = self._store.insert(STOCK_MOVEMENTS, movement.to_record())
        except StoreError:
            logger.error(
                "Ledger write failed for product #%s, restoring quantity %s",
                product_id, current,
            )
            self._store.update(PRODUCTS, product_id, {"quantity": current})
            raise

        logger.info(
            "Stock of product #%s %s: %+d (%s) -> %s",
            product_id, product["name"], delta, movement.reason, new_quantity,
        )
        return replace(movement, id=movement_id)

    def revert(self, movement: StockMovement) -> None:
        """Undo a movement returned by ``adjust()``.

        Restores the product's quantity and removes the ledger entry, for
        callers whose own write failed after the adjustment.
        """
        product = self._store.get_by_id(PRODUCTS, movement.product_id)
        if product is not None:
            self._store.update(
                PRODUCTS,
                movement.product_id,
                {"quantity": product.get("quantity", 0) - movement.delta},
            )
        if movement.id is not None:
            self._store.delete(STOCK_MOVEMENTS, movement.id)
        logger.warning(
            "Stock movement #%s of product #%s reverted (%+d)",
            movement.id, movement.product_id, movement.delta,
        )

    def receive(
        self,
        product_id: int,
        quantity: int,
        reason: str = REASON_RECEPTION,
        note: str = "",
        actor: str | None = None,
    ) -> StockMovement:
        """Add ``quantity`` units to the stock."""
        quantity = _whole_number(quantity, "Quantity")
        if quantity <= 0:
            raise ValidationError("Quantity to add must be positive")
        return self.adjust(product_id, quantity, reason, note, actor)

    def remove(
        self,
        product_id: int,
        quantity: int,
        reason: str,
        note: str = "",
        actor: str | None = None,
    ) -> StockMovement:
        """Take ``quantity`` units out of the stock."""
        quantity = _whole_number(quantity, "Quantity")
        if quantity <= 0:
            raise ValidationError("Quantity to remove must be positive")
        return self.adjust(product_id, -quantity, reason, note, actor)

    def set_quantity(
        self,
        product_id: int,
        quantity: int,
        reason: str,
        note: str = "",
        actor: str | None = None,
    ) -> StockMovement | None:
        """Bring the stock to an absolute level (e.g. after a count).

        Returns None when the level is already ``quantity``.
        """
        quantity = _whole_number(quantity, "Quantity")
        if quantity < 0:
            raise ValidationError(f"Quantity cannot be negative, got {quantity}")

        product = self._store.get_by_id(PRODUCTS, product_id)
        if product is None:
            raise NotFoundError(f"Product #{product_id} not found")

        delta = quantity - product.get("quantity", 0)
        if delta == 0:
            return None
        return self.adjust(product_id, delta, reason, note, actor)

    # --- Queries --------------------------------------------------------------

    def history(self, product_id: int | None = None) -> list[StockMovement]:
        """Ledger entries, newest first, optionally for one product."""
        criteria = {"product_id": product_id} if product_id is not None else None
        raws = self._store.find(STOCK_MOVEMENTS, criteria)
        movements = [StockMovement.from_record(raw) for raw in raws]
        return sorted(movements, key=lambda m: (m.timestamp, m.id or 0), reverse=True)

    def balance(self, product_id: int) -> int:
        """Sum of all recorded deltas for a product."""
        return sum(m.delta for m in self.history(product_id))
