"""Invoice aggregate.

An invoice is issued from exactly one completed or delivered order. Client
name, lines and total are copied by value at generation time, so later
edits to the order never change an issued invoice.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from enum import Enum
from typing import Any

from cafe.domain.exceptions import ValidationError
from cafe.domain.model.order import Order, OrderLine, lines_total, parse_date
from cafe.domain.model.value_objects import Money


class InvoiceStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"

    @staticmethod
    def parse(value: str | InvoiceStatus) -> InvoiceStatus:
        if isinstance(value, InvoiceStatus):
            return value
        for status in InvoiceStatus:
            if status.value.lower() == str(value).strip().lower():
                return status
        raise ValidationError(f"Unknown invoice status: {value!r}")


@dataclass
class Invoice:

    id: int | None
    order_id: int
    client_name: str
    lines: tuple[OrderLine, ...]
    total: Money
    date: str
    status: InvoiceStatus = InvoiceStatus.PENDING
    notes: str = ""
    created_at: str | None = None
    updated_at: str | None = None

    @staticmethod
    def from_order(
        order: Order,
        date: str | date_type | None = None,
        status: str | InvoiceStatus = InvoiceStatus.PENDING,
        notes: str = "",
    ) -> Invoice:
        """Issue an invoice for a persisted, billable order."""
        if order.id is None:
            raise ValidationError("Cannot invoice an order that was never saved")
        if not order.status.is_billable:
            raise ValidationError(
                f"Cannot invoice order #{order.id} in {order.status.value} status, "
                f"it must be Done or Delivered"
            )
        return Invoice(
            id=None,
            order_id=order.id,
            client_name=order.client_name,
            # OrderLine and Money are frozen, a fresh tuple is a full copy
            lines=tuple(order.lines),
            total=order.total,
            date=parse_date(date),
            status=InvoiceStatus.parse(status),
            notes=(notes or "").strip(),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "client_name": self.client_name,
            "date": self.date,
            "lines": [line.to_record() for line in self.lines],
            "total": self.total.to_float(),
            "status": self.status.value,
            "notes": self.notes,
        }

    @staticmethod
    def from_record(raw: dict[str, Any], currency: str = "EUR") -> Invoice:
        lines = tuple(OrderLine.from_record(item, currency) for item in raw.get("lines", []))
        total = raw.get("total")
        return Invoice(
            id=raw["id"],
            order_id=raw["order_id"],
            client_name=raw["client_name"],
            lines=lines,
            total=Money.of(total, currency) if total is not None else lines_total(lines, currency),
            date=raw.get("date", ""),
            status=InvoiceStatus.parse(raw.get("status", InvoiceStatus.PENDING.value)),
            notes=raw.get("notes", ""),
            created_at=raw.get("created_at"),
            updated_at=raw.get("updated_at"),
        )
