"""Purchase aggregate: goods received from a supplier.

Receiving a purchase is the only way stock grows outside of returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from perfume_pos.domain.exceptions import ValidationError
from perfume_pos.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class PurchaseItem:
    variant_id: int
    variant_label: str
    quantity: Quantity
    unit_cost: Money

    @property
    def subtotal(self) -> Money:
        return self.unit_cost * self.quantity.value


@dataclass(frozen=True)
class Purchase:

    id: int
    supplier_name: str
    items: tuple[PurchaseItem, ...]
    notes: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        purchase_id: int,
        supplier_name: str,
        items: list[PurchaseItem],
        notes: str = "",
    ) -> Purchase:
        if not supplier_name or not supplier_name.strip():
            raise ValidationError("Supplier name is required")
        if not items:
            raise ValidationError("A purchase must contain at least one item")
        return Purchase(
            id=purchase_id,
            supplier_name=supplier_name.strip(),
            items=tuple(items),
            notes=(notes or "").strip(),
        )

    @property
    def total_amount(self) -> Money:
        return Money.total(item.subtotal for item in self.items)
