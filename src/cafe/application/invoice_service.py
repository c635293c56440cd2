"""Application service: invoices.

An invoice is generated once per billable order and keeps its own copy of
the order's client, lines and total. Only its date, status and notes can
be edited afterwards.
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Any

from cafe.domain.exceptions import ConflictError, NotFoundError
from cafe.domain.model.invoice import Invoice, InvoiceStatus
from cafe.domain.model.order import Order, parse_date
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.document_store import INVOICES, ORDERS, DocumentStore

logger = logging.getLogger(__name__)


class InvoiceService:

    def __init__(self, store: DocumentStore, currency: str = "EUR") -> None:
        self._store = store
        self._currency = currency

    # --- Commands -------------------------------------------------------------

    def generate(
        self,
        order_id: int,
        date: str | date_type | None = None,
        status: str | InvoiceStatus = InvoiceStatus.PENDING,
        notes: str = "",
    ) -> Invoice:
        """Issue the invoice of a Done or Delivered order.

        Raises:
            NotFoundError: the order does not exist.
            ValidationError: the order is not Done or Delivered.
            ConflictError: the order already has an invoice.
        """
        raw = self._store.get_by_id(ORDERS, order_id)
        if raw is None:
            raise NotFoundError(f"Order #{order_id} not found")

        invoice = Invoice.from_order(Order.from_record(raw, self._currency), date, status, notes)
        if self._store.exists(INVOICES, {"order_id": order_id}):
            raise ConflictError(f"Order #{order_id} already has an invoice")

        invoice_id = self._store.insert(INVOICES, invoice.to_record())
        logger.info("Invoice #%s generated for order #%s (%s)", invoice_id, order_id, invoice.total)
        return self.get(invoice_id)

    def update(
        self,
        invoice_id: int,
        date: str | date_type | None = None,
        status: str | InvoiceStatus | None = None,
        notes: str | None = None,
    ) -> Invoice:
        self.get(invoice_id)
        fields: dict[str, Any] = {}
        if date is not None:
            fields["date"] = parse_date(date)
        if status is not None:
            fields["status"] = InvoiceStatus.parse(status).value
        if notes is not None:
            fields["notes"] = notes.strip()

        self._store.update(INVOICES, invoice_id, fields)
        return self.get(invoice_id)

    def delete(self, invoice_id: int) -> None:
        self.get(invoice_id)
        self._store.delete(INVOICES, invoice_id)
        logger.info("Invoice #%s deleted", invoice_id)

    # --- Queries --------------------------------------------------------------

    def get(self, invoice_id: int) -> Invoice:
        raw = self._store.get_by_id(INVOICES, invoice_id)
        if raw is None:
            raise NotFoundError(f"Invoice #{invoice_id} not found")
        return Invoice.from_record(raw, self._currency)

    def list_all(self) -> list[Invoice]:
        return self.filter()

    def filter(
        self,
        start_date: str | date_type | None = None,
        end_date: str | date_type | None = None,
        client: str | None = None,
    ) -> list[Invoice]:
        """Invoices in a date range (inclusive) whose client name contains
        ``client`` (case-insensitive), most recent first."""
        date_range: dict[str, str] = {}
        if start_date:
            date_range["$gte"] = parse_date(start_date, "Start date")
        if end_date:
            date_range["$lte"] = parse_date(end_date, "End date")
        criteria = {"date": date_range} if date_range else None

        invoices = [Invoice.from_record(raw, self._currency) for raw in self._store.find(INVOICES, criteria)]
        if client:
            needle = client.strip().lower()
            invoices = [i for i in invoices if needle in i.client_name.lower()]
        return sorted(invoices, key=lambda i: (i.date, i.id or 0), reverse=True)

    def revenue(self) -> Money:
        """Sum of the totals of paid invoices."""
        total = Money.zero(self._currency)
        for raw in self._store.find(INVOICES, {"status": InvoiceStatus.PAID.value}):
            total = total + Invoice.from_record(raw, self._currency).total
        return total
