"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

A command opens one ``AppContext`` for its whole run and closes it on the
way out, instead of sharing module-level state between calls.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from cafe.application.dashboard import DashboardHandler
from cafe.application.invoice_service import InvoiceService
from cafe.application.order_service import OrderService
from cafe.application.product_service import ProductService
from cafe.domain.repository.document_store import DocumentStore
from cafe.domain.service.stock_service import StockService
from cafe.infrastructure.config import Settings, get_settings
from cafe.infrastructure.persistence.json_document_store import JsonDocumentStore


@dataclass
class AppContext:
    store: DocumentStore
    stock: StockService
    products: ProductService
    orders: OrderService
    invoices: InvoiceService
    dashboard: DashboardHandler


def document_store(settings: Settings | None = None) -> JsonDocumentStore:
    settings = settings or get_settings()
    return JsonDocumentStore(settings.data_dir, settings.db_name)


def build_context(store: DocumentStore, settings: Settings | None = None) -> AppContext:
    settings = settings or get_settings()
    stock = StockService(store, actor=settings.actor)
    products = ProductService(
        store,
        stock,
        currency=settings.currency,
        default_threshold=settings.default_stock_alert,
    )
    orders = OrderService(store, currency=settings.currency)
    invoices = InvoiceService(store, currency=settings.currency)
    return AppContext(
        store=store,
        stock=stock,
        products=products,
        orders=orders,
        invoices=invoices,
        dashboard=DashboardHandler(products, orders, invoices),
    )


@contextmanager
def app_context(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
) -> Iterator[AppContext]:
    """Open the store, hand out the services, close the store afterwards."""
    settings = settings or get_settings()
    with (store or document_store(settings)) as opened:
        yield build_context(opened, settings)
