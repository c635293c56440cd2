"""Demo catalog for a fresh installation."""

from __future__ import annotations

import logging

from cafe.application.product_service import ProductService
from cafe.domain.repository.document_store import PRODUCTS, DocumentStore

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    # name, category, price, cost, quantity, threshold, description
    ("Espresso", "Hot drinks", "2.50", "0.80", 100, 20, "Intense and aromatic espresso"),
    ("Café Latte", "Hot drinks", "3.50", "1.20", 80, 15, "Smooth milky coffee"),
    ("Green Tea", "Hot drinks", "3.00", "0.90", 50, 10, "Organic green tea"),
    ("Hot Chocolate", "Hot drinks", "4.00", "1.50", 40, 8, "Creamy hot chocolate"),
    ("Orange Juice", "Cold drinks", "3.50", "1.20", 30, 5, "Freshly squeezed orange juice"),
    ("Mineral Water", "Cold drinks", "2.00", "0.50", 100, 20, "Natural mineral water"),
    ("Croissant", "Pastries", "1.80", "0.60", 25, 5, "All-butter croissant"),
    ("Pain au Chocolat", "Pastries", "2.00", "0.70", 20, 5, "All-butter pain au chocolat"),
    ("Ham & Cheese Sandwich", "Snacks", "5.50", "2.00", 15, 3, "Ham and cheese sandwich"),
    ("Caesar Salad", "Snacks", "7.50", "3.00", 10, 2, "Caesar salad with grilled chicken"),
]


def seed_demo_products(store: DocumentStore, products: ProductService) -> int:
    """Load the demo catalog if there are no products yet.

    Returns the number of products created (0 when the catalog was not empty).
    """
    if store.count(PRODUCTS) > 0:
        return 0

    for name, category, price, cost, quantity, threshold, description in DEMO_PRODUCTS:
        products.create(
            name=name,
            category=category,
            price=price,
            cost=cost,
            quantity=quantity,
            threshold=threshold,
            description=description,
        )
    logger.info("Seeded %d demo products", len(DEMO_PRODUCTS))
    return len(DEMO_PRODUCTS)
