"""Cart: a transient till holding what one customer is about to buy.

Carts are never persisted.  Each variant appears at most once; adding it
again bumps the quantity.  Quantities are kept within ``[1, stock_qty]``
using the variant state known at the time of the change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from perfume_pos.domain.exceptions import EntityNotFoundError
from perfume_pos.domain.model.catalog import Variant
from perfume_pos.domain.model.value_objects import Money


class AddOutcome(Enum):
    ADDED = "added"
    INCREMENTED = "incremented"
    OUT_OF_STOCK = "out_of_stock"  # soft warning, cart unchanged


@dataclass
class CartLine:
    variant: Variant
    quantity: int

    @property
    def subtotal(self) -> Money:
        return self.variant.price * self.quantity


@dataclass
class Cart:
    id: int
    name: str
    lines: dict[int, CartLine] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total(self) -> Money:
        return Money.total(line.subtotal for line in self.lines.values())

    def add(self, variant: Variant) -> AddOutcome:
        line = self.lines.get(variant.id)
        if line is None:
            if variant.stock_qty < 1:
                return AddOutcome.OUT_OF_STOCK
            self.lines[variant.id] = CartLine(variant=variant, quantity=1)
            return AddOutcome.ADDED

        if variant.stock_qty < 1:
            # Nothing left to sell; keep the line as-is until it is removed.
            return AddOutcome.OUT_OF_STOCK
        line.variant = variant
        if line.quantity >= variant.stock_qty:
            line.quantity = variant.stock_qty
            return AddOutcome.OUT_OF_STOCK
        line.quantity += 1
        return AddOutcome.INCREMENTED

    def set_quantity(self, variant_id: int, quantity: int) -> int:
        """Clamp *quantity* into ``[1, stock_qty]`` and return what was kept."""
        line = self._line(variant_id)
        ceiling = line.variant.stock_qty
        if ceiling < 1:
            # Nothing left to sell; keep the line as-is until it is removed.
            return line.quantity
        line.quantity = min(max(1, quantity), ceiling)
        return line.quantity

    def remove(self, variant_id: int) -> None:
        self._line(variant_id)
        del self.lines[variant_id]

    def _line(self, variant_id: int) -> CartLine:
        line = self.lines.get(variant_id)
        if line is None:
            raise EntityNotFoundError(
                f"Variant #{variant_id} is not in cart {self.name}"
            )
        return line
