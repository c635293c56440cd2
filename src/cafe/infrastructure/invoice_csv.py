"""CSV export of invoices.

One row per invoice with the header ``Invoice,Date,Client,Amount,Status``.
Amounts are written as plain numbers with two decimals.
"""

from __future__ import annotations

import csv
from typing import TextIO

from cafe.domain.model.invoice import Invoice

HEADER = ["Invoice", "Date", "Client", "Amount", "Status"]


def export_invoices(invoices: list[Invoice], stream: TextIO) -> int:
    """Write ``invoices`` as CSV to ``stream`` and return the row count."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    for invoice in invoices:
        writer.writerow([
            invoice.id,
            invoice.date,
            invoice.client_name,
            f"{invoice.total.rounded():.2f}",
            invoice.status.value,
        ])
    return len(invoices)
