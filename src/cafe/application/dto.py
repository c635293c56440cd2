"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without exposing
domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OrderLineSpec:
    """Input: which product the client asked for, and how many."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class LowStockDTO:
    product_id: int
    name: str
    quantity: int
    threshold: int

    @property
    def is_out(self) -> bool:
        return self.quantity <= 0


@dataclass(frozen=True)
class DashboardDTO:
    """Output: the figures shown on the home screen."""

    day: str
    orders_today: int
    units_in_stock: int
    revenue: str  # formatted, e.g. "42.50 €"
    low_stock: list[LowStockDTO]
