"""Application service: Dashboard use case (query)."""

from __future__ import annotations

from datetime import date as date_type

from cafe.application.dto import DashboardDTO, LowStockDTO
from cafe.application.invoice_service import InvoiceService
from cafe.application.order_service import OrderService
from cafe.application.product_service import ProductService
from cafe.domain.model.order import parse_date


class DashboardHandler:

    def __init__(
        self,
        products: ProductService,
        orders: OrderService,
        invoices: InvoiceService,
    ) -> None:
        self._products = products
        self._orders = orders
        self._invoices = invoices

    def handle(self, day: str | date_type | None = None) -> DashboardDTO:
        today = parse_date(day)
        products = self._products.list_all()
        return DashboardDTO(
            day=today,
            orders_today=len(self._orders.on_date(today)),
            units_in_stock=sum(p.quantity for p in products),
            revenue=str(self._invoices.revenue()),
            low_stock=[
                LowStockDTO(
                    product_id=p.id,  # type: ignore[arg-type]
                    name=p.name,
                    quantity=p.quantity,
                    threshold=p.threshold,
                )
                for p in self._products.low_stock()
            ],
        )
