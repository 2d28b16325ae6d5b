"""Sale aggregate: an immutable record of a completed checkout.

Line items capture the variant's price at sale time so later catalog
price changes never rewrite history.  Returns reference a Sale; they
never modify it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from perfume_pos.domain.exceptions import EmptyCartError, ValidationError
from perfume_pos.domain.model.value_objects import Money, Quantity

DEFAULT_CASHIER = "Caissier Principal"


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]


_PAYMENT_LABELS = {
    PaymentMethod.CASH: "Espèces",
    PaymentMethod.CARD: "Carte",
    PaymentMethod.TRANSFER: "Virement",
}


@dataclass(frozen=True)
class SaleLineItem:
    """One purchased variant within a Sale (price locked at sale time)."""

    id: int
    variant_id: int
    variant_label: str
    sku: str
    quantity: Quantity
    unit_price: Money

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class Sale:
    """Aggregate root for committed sales.

    Use ``Sale.create()`` for new sales; the plain constructor is for
    repositories reconstituting persisted records.
    """

    id: int
    items: tuple[SaleLineItem, ...]
    payment_method: PaymentMethod
    cashier_name: str = DEFAULT_CASHIER
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        sale_id: int,
        items: list[SaleLineItem],
        payment_method: PaymentMethod,
        cashier_name: str | None = None,
        created_at: datetime | None = None,
    ) -> Sale:
        if not items:
            raise EmptyCartError("A sale must contain at least one item")

        line_ids = [item.id for item in items]
        if len(set(line_ids)) != len(line_ids):
            raise ValidationError("Sale line item IDs must be unique")

        return Sale(
            id=sale_id,
            items=tuple(items),
            payment_method=payment_method,
            cashier_name=(cashier_name or "").strip() or DEFAULT_CASHIER,
            created_at=created_at or datetime.now(timezone.utc),
        )

    @property
    def total_amount(self) -> Money:
        return Money.total(item.subtotal for item in self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    def find_item(self, sale_item_id: int) -> SaleLineItem | None:
        for item in self.items:
            if item.id == sale_item_id:
                return item
        return None
