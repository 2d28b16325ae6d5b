"""Catalog aggregates: categories, perfumes and their sellable variants.

The catalog itself is administered elsewhere; this system only reads it,
except for ``Variant.stock_qty`` which the StockMutator owns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from perfume_pos.domain.exceptions import ValidationError
from perfume_pos.domain.model.value_objects import Money


class Gender(Enum):
    UNISEX = "unisex"
    WOMEN = "women"
    MEN = "men"


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    slug: str
    description: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class Perfume:
    id: int
    name: str
    slug: str
    category_id: int
    gender: Gender = Gender.UNISEX
    description: str = ""
    is_active: bool = True


@dataclass
class Variant:
    """One size of one perfume: the unit the shop actually sells.

    Invariants:
    - ``stock_qty`` is never negative
    - ``is_in_stock`` / ``is_low_stock`` are derived from ``stock_qty`` on
      every read, so they can never drift from it
    """

    id: int
    perfume_id: int
    perfume_name: str
    size_ml: int
    sku: str
    price: Money
    stock_qty: int
    low_stock_threshold: int = 5
    barcode: str = ""
    is_active: bool = True
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.stock_qty < 0:
            raise ValidationError(f"Stock of {self.label} cannot be negative")
        if self.low_stock_threshold < 0:
            raise ValidationError(f"Low-stock threshold of {self.label} cannot be negative")

    @property
    def label(self) -> str:
        return f"{self.perfume_name} {self.size_ml}ml"

    @property
    def is_in_stock(self) -> bool:
        return self.stock_qty > 0

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock_qty <= self.low_stock_threshold

    def apply_stock_delta(self, delta: int, when: datetime | None = None) -> None:
        """Shift ``stock_qty`` by *delta*.

        Only the StockMutator calls this; it has already checked every
        variant of the batch, so a failure here means a programming error.
        """
        new_qty = self.stock_qty + delta
        if new_qty < 0:
            raise ValidationError(
                f"Stock of {self.label} would become negative ({new_qty})"
            )
        self.stock_qty = new_qty
        self.updated_at = when or datetime.now(timezone.utc)
