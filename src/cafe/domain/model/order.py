"""Order aggregate.

The Order owns its lines. Each line is an ``OrderLine`` value: a one-way
copy of the product's name and price taken when the line is written, never
a live reference to the product.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as date_type
from enum import Enum
from typing import Any

from cafe.domain.exceptions import ValidationError
from cafe.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "Pending"
    PREPARING = "Preparing"
    DONE = "Done"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @property
    def is_billable(self) -> bool:
        """Only completed or delivered orders can be invoiced."""
        return self in (OrderStatus.DONE, OrderStatus.DELIVERED)

    @staticmethod
    def parse(value: str | OrderStatus) -> OrderStatus:
        if isinstance(value, OrderStatus):
            return value
        for status in OrderStatus:
            if status.value.lower() == str(value).strip().lower():
                return status
        raise ValidationError(f"Unknown order status: {value!r}")


def parse_date(value: str | date_type | None, label: str = "Date") -> str:
    """Normalise a calendar date to its ISO form (``YYYY-MM-DD``)."""
    if value is None:
        return date_type.today().isoformat()
    if isinstance(value, date_type):
        return value.isoformat()
    try:
        return date_type.fromisoformat(str(value).strip()).isoformat()
    except ValueError as exc:
        raise ValidationError(f"{label} must be YYYY-MM-DD, got {value!r}") from exc


@dataclass(frozen=True)
class OrderLine:
    """Snapshot of one product at the time the line was written."""

    product_id: int
    product_name: str
    quantity: Quantity
    unit_price: Money

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value

    def to_record(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity.value,
            "unit_price": self.unit_price.to_float(),
            "subtotal": self.subtotal.to_float(),
        }

    @staticmethod
    def from_record(raw: dict[str, Any], currency: str = "EUR") -> OrderLine:
        return OrderLine(
            product_id=raw["product_id"],
            product_name=raw["product_name"],
            quantity=Quantity(raw["quantity"]),
            unit_price=Money.of(raw["unit_price"], currency),
        )


def lines_total(lines: list[OrderLine] | tuple[OrderLine, ...], currency: str = "EUR") -> Money:
    result = Money.zero(currency)
    for line in lines:
        result = result + line.subtotal
    return result


@dataclass
class Order:
    """Aggregate root for café orders.

    Use ``Order.create()`` for new orders; ``__init__`` stays simple so
    stored orders can be rebuilt without re-validating.
    """

    id: int | None
    client_name: str
    lines: list[OrderLine]
    date: str = field(default_factory=lambda: date_type.today().isoformat())
    status: OrderStatus = OrderStatus.PENDING
    notes: str = ""
    created_at: str | None = None
    updated_at: str | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        client_name: str,
        lines: list[OrderLine],
        date: str | date_type | None = None,
        status: str | OrderStatus = OrderStatus.PENDING,
        notes: str = "",
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        order = Order(
            id=None,
            client_name=client_name,
            lines=list(lines),
            date=parse_date(date),
            status=OrderStatus.parse(status),
            notes=(notes or "").strip(),
        )
        order.validate()
        return order

    def validate(self) -> None:
        if not self.client_name or not self.client_name.strip():
            raise ValidationError("Client name is required")
        self.client_name = self.client_name.strip()
        if not self.lines:
            raise ValidationError("Order must contain at least one line")

    # --- Computed properties --------------------------------------------------

    @property
    def currency(self) -> str:
        return self.lines[0].unit_price.currency if self.lines else "EUR"

    @property
    def total(self) -> Money:
        return lines_total(self.lines, self.currency)

    def references(self, product_id: int) -> bool:
        return any(line.product_id == product_id for line in self.lines)

    # --- Persistence mapping --------------------------------------------------

    def to_record(self) -> dict[str, Any]:
        """Record form; ``total`` is always recomputed from the lines."""
        return {
            "client_name": self.client_name,
            "date": self.date,
            "status": self.status.value,
            "lines": [line.to_record() for line in self.lines],
            "total": self.total.to_float(),
            "notes": self.notes,
        }

    @staticmethod
    def from_record(raw: dict[str, Any], currency: str = "EUR") -> Order:
        return Order(
            id=raw["id"],
            client_name=raw["client_name"],
            lines=[OrderLine.from_record(item, currency) for item in raw.get("lines", [])],
            date=raw.get("date", ""),
            status=OrderStatus.parse(raw.get("status", OrderStatus.PENDING.value)),
            notes=raw.get("notes", ""),
            created_at=raw.get("created_at"),
            updated_at=raw.get("updated_at"),
        )
