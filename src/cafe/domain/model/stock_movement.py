"""StockMovement: one immutable entry of the stock ledger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Reason tags written by the system itself. Manual adjustments carry any
# free-text reason chosen by the operator ("Reception", "Sale", "Breakage"...).
REASON_OPENING = "Opening stock"
REASON_PRODUCT_EDIT = "Product edit"
REASON_DELETION = "Deletion"
REASON_RECEPTION = "Reception"


@dataclass(frozen=True)
class StockMovement:
    """Signed quantity change of one product.

    ``product_name`` is a snapshot so the ledger stays readable after the
    product is renamed or deleted.
    """

    id: int | None
    product_id: int
    product_name: str
    delta: int
    reason: str
    note: str
    actor: str
    timestamp: str

    @property
    def is_inbound(self) -> bool:
        return self.delta > 0

    def to_record(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "delta": self.delta,
            "reason": self.reason,
            "note": self.note,
            "actor": self.actor,
            "timestamp": self.timestamp,
        }

    @staticmethod
    def from_record(raw: dict[str, Any]) -> StockMovement:
        return StockMovement(
            id=raw["id"],
            product_id=raw["product_id"],
            product_name=raw.get("product_name", ""),
            delta=raw["delta"],
            reason=raw.get("reason", ""),
            note=raw.get("note", ""),
            actor=raw.get("actor", ""),
            timestamp=raw.get("timestamp", raw.get("created_at", "")),
        )
