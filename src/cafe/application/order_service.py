"""Application service: café orders.

Coordinates the products collection (name and price snapshots) and the
Order aggregate. The stored total is always recomputed from the lines;
a total supplied by the caller is never trusted.
"""

from __future__ import annotations

import logging
from datetime import date as date_type

from cafe.application.dto import OrderLineSpec
from cafe.domain.exceptions import NotFoundError
from cafe.domain.model.order import Order, OrderLine, OrderStatus, parse_date
from cafe.domain.model.value_objects import Money, Quantity
from cafe.domain.repository.document_store import INVOICES, ORDERS, PRODUCTS, DocumentStore

logger = logging.getLogger(__name__)


class OrderService:

    def __init__(self, store: DocumentStore, currency: str = "EUR") -> None:
        self._store = store
        self._currency = currency

    # --- Commands -------------------------------------------------------------

    def create(
        self,
        client_name: str,
        lines: list[OrderLineSpec],
        date: str | date_type | None = None,
        status: str | OrderStatus = OrderStatus.PENDING,
        notes: str = "",
    ) -> Order:
        """Create an order, snapshotting each product's current name and price."""
        order = Order.create(
            client_name=client_name,
            lines=self._resolve_lines(lines),
            date=date,
            status=status,
            notes=notes,
        )
        order_id = self._store.insert(ORDERS, order.to_record())
        logger.info("Order #%s created for %s (%s)", order_id, order.client_name, order.total)
        return self.get(order_id)

    def update(
        self,
        order_id: int,
        client_name: str | None = None,
        lines: list[OrderLineSpec] | None = None,
        date: str | date_type | None = None,
        status: str | OrderStatus | None = None,
        notes: str | None = None,
    ) -> Order:
        """Edit an order. Only the given arguments change.

        Replacement lines for a product already on the order keep that
        line's original price snapshot; new products are priced now.
        """
        order = self.get(order_id)
        if client_name is not None:
            order.client_name = client_name
        if lines is not None:
            order.lines = self._resolve_lines(lines, previous=order.lines)
        if date is not None:
            order.date = parse_date(date)
        if status is not None:
            order.status = OrderStatus.parse(status)
        if notes is not None:
            order.notes = notes.strip()
        order.validate()

        self._store.update(ORDERS, order_id, order.to_record())
        return self.get(order_id)

    def set_status(self, order_id: int, status: str | OrderStatus) -> Order:
        return self.update(order_id, status=status)

    def delete(self, order_id: int) -> None:
        self.get(order_id)
        self._store.delete(ORDERS, order_id)
        logger.info("Order #%s deleted", order_id)

    # --- Queries --------------------------------------------------------------

    def get(self, order_id: int) -> Order:
        raw = self._store.get_by_id(ORDERS, order_id)
        if raw is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return Order.from_record(raw, self._currency)

    def list_all(self) -> list[Order]:
        """Every order, most recent date first."""
        return self._sorted(self._store.get_all(ORDERS))

    def on_date(self, day: str | date_type) -> list[Order]:
        return self._sorted(self._store.find(ORDERS, {"date": parse_date(day)}))

    def billable(self) -> list[Order]:
        """Done or delivered orders that have no invoice yet."""
        invoiced = [raw["order_id"] for raw in self._store.get_all(INVOICES)]
        raws = self._store.find(
            ORDERS,
            {
                "status": {"$in": [OrderStatus.DONE.value, OrderStatus.DELIVERED.value]},
                "id": {"$nin": invoiced},
            },
        )
        return self._sorted(raws)

    # --- Internal helpers -----------------------------------------------------

    def _resolve_lines(
        self,
        specs: list[OrderLineSpec],
        previous: list[OrderLine] | None = None,
    ) -> list[OrderLine]:
        known = {line.product_id: line for line in previous or []}
        lines: list[OrderLine] = []

        for spec in specs:
            quantity = Quantity(spec.quantity)
            snapshot = known.get(spec.product_id)
            if snapshot is not None:
                lines.append(OrderLine(snapshot.product_id, snapshot.product_name, quantity, snapshot.unit_price))
                continue

            product = self._store.get_by_id(PRODUCTS, spec.product_id)
            if product is None:
                raise NotFoundError(f"Product #{spec.product_id} not found")
            lines.append(
                OrderLine(
                    product_id=spec.product_id,
                    product_name=product["name"],
                    quantity=quantity,
                    unit_price=Money.of(product["price"], self._currency),  # <-- price snapshot
                )
            )
        return lines

    def _sorted(self, raws: list[dict]) -> list[Order]:
        orders = [Order.from_record(raw, self._currency) for raw in raws]
        return sorted(orders, key=lambda o: (o.date, o.id or 0), reverse=True)
