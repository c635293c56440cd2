"""Product aggregate.

Products live independently of orders: prices change, stock moves and
products are added to or removed from the catalog. Orders only ever hold
a snapshot of a product's name and price.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from cafe.domain.exceptions import ValidationError
from cafe.domain.model.value_objects import Money

PRODUCT_CATEGORIES = (
    "Hot drinks",
    "Cold drinks",
    "Pastries",
    "Snacks",
    "Other",
)

EDITABLE_FIELDS = frozenset(
    {"name", "category", "price", "cost", "quantity", "threshold", "description"}
)


def _non_negative_int(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be a whole number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{label} cannot be negative, got {value}")
    return value


def _required_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


@dataclass
class Product:
    """A product in the catalog.

    Invariants:
    - ``name`` and ``category`` are non-empty
    - ``price``, ``cost``, ``quantity`` and ``threshold`` are non-negative
    """

    id: int | None
    name: str
    category: str
    price: Money
    cost: Money
    quantity: int = 0
    threshold: int = 0
    description: str = ""
    created_at: str | None = None
    updated_at: str | None = None

    # --- Factory (used for NEW products only) ---------------------------------

    @staticmethod
    def create(
        name: str,
        category: str,
        price: str | float | int | Money,
        cost: str | float | int | Money,
        quantity: int = 0,
        threshold: int = 0,
        description: str = "",
        currency: str = "EUR",
    ) -> Product:
        """Build a validated product that has not been persisted yet."""
        return Product(
            id=None,
            name=_required_text(name, "Product name"),
            category=_required_text(category, "Product category"),
            price=price if isinstance(price, Money) else Money.of(price, currency),
            cost=cost if isinstance(cost, Money) else Money.of(cost, currency),
            quantity=_non_negative_int(quantity, "Quantity"),
            threshold=_non_negative_int(threshold, "Threshold"),
            description=(description or "").strip(),
        )

    def with_changes(self, **changes: Any) -> Product:
        """Return a validated copy with ``changes`` applied.

        Unknown field names are rejected so a typo never silently drops an
        edit.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update product field(s): {', '.join(sorted(unknown))}"
            )
        merged = {
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "cost": self.cost,
            "quantity": self.quantity,
            "threshold": self.threshold,
            "description": self.description,
        }
        merged.update(changes)
        fresh = Product.create(**merged, currency=self.price.currency)
        return replace(
            fresh,
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    # --- Computed properties --------------------------------------------------

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity <= 0

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.threshold

    @property
    def margin(self) -> Money | None:
        """Unit margin, or None when the product sells below cost."""
        if self.price < self.cost:
            return None
        return Money(self.price.amount - self.cost.amount, self.price.currency)

    # --- Persistence mapping --------------------------------------------------

    def to_record(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "price": self.price.to_float(),
            "cost": self.cost.to_float(),
            "quantity": self.quantity,
            "threshold": self.threshold,
            "description": self.description,
        }

    @staticmethod
    def from_record(raw: dict[str, Any], currency: str = "EUR") -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            category=raw.get("category", ""),
            price=Money.of(raw.get("price", 0), currency),
            cost=Money.of(raw.get("cost", 0), currency),
            quantity=raw.get("quantity", 0),
            threshold=raw.get("threshold", 0),
            description=raw.get("description", ""),
            created_at=raw.get("created_at"),
            updated_at=raw.get("updated_at"),
        )
