"""CSV export and import of the product catalog.

The file has a fixed header row::

    ID,Name,Category,Price,Cost,Stock,Threshold,Description

Import upserts by product name. It works in two phases, like the
reservation of stock for an order: every row is parsed and validated first,
and only then are products created or updated, so a bad row leaves the
catalog untouched.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from typing import Any, TextIO

from cafe.application.product_service import ProductService
from cafe.domain.exceptions import ValidationError
from cafe.domain.model.product import Product

logger = logging.getLogger(__name__)

HEADER = ["ID", "Name", "Category", "Price", "Cost", "Stock", "Threshold", "Description"]
_MIN_COLUMNS = 7


@dataclass(frozen=True)
class ImportResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0


def export_products(products: list[Product], stream: TextIO) -> int:
    """Write ``products`` as CSV to ``stream`` and return the row count."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    for p in products:
        writer.writerow([
            p.id,
            p.name,
            p.category,
            f"{p.price.rounded():.2f}",
            f"{p.cost.rounded():.2f}",
            p.quantity,
            p.threshold,
            p.description,
        ])
    return len(products)


def import_products(service: ProductService, stream: TextIO) -> ImportResult:
    """Create or update products from a CSV stream."""
    rows = list(csv.reader(stream))
    if len(rows) < 2:
        raise ValidationError("The CSV file is empty or has no data rows")

    header = [column.strip() for column in rows[0]]
    missing = [column for column in HEADER if column not in header]
    if missing:
        raise ValidationError(f"The CSV header is missing: {', '.join(missing)}")
    position = {column: header.index(column) for column in HEADER}

    # Phase 1: parse and validate every row
    parsed: list[dict[str, Any]] = []
    skipped = 0
    for line_no, row in enumerate(rows[1:], start=2):
        if not any(cell.strip() for cell in row):
            continue
        if len(row) < _MIN_COLUMNS:
            skipped += 1
            continue
        try:
            parsed.append(_parse_row(row, position))
        except (ValidationError, ValueError) as exc:
            raise ValidationError(f"Line {line_no}: {exc}") from exc

    # Phase 2: write
    created = updated = 0
    for fields in parsed:
        existing = service.find_by_name(fields["name"])
        if existing is not None:
            service.update(existing.id, **fields)  # type: ignore[arg-type]
            updated += 1
        else:
            service.create(**fields)
            created += 1

    logger.info("CSV import: %d created, %d updated, %d skipped", created, updated, skipped)
    return ImportResult(created=created, updated=updated, skipped=skipped)


def _parse_row(row: list[str], position: dict[str, int]) -> dict[str, Any]:
    def cell(column: str) -> str:
        index = position[column]
        return row[index].strip() if index < len(row) else ""

    fields = {
        "name": cell("Name"),
        "category": cell("Category"),
        "price": cell("Price"),
        "cost": cell("Cost"),
        "quantity": int(cell("Stock")),
        "threshold": int(cell("Threshold")),
        "description": cell("Description"),
    }
    # Validates without touching the store.
    Product.create(**fields)
    return fields
