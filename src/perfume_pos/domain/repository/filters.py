"""Query filters shared by every repository implementation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from perfume_pos.domain.model.catalog import Variant


class StockLevel(Enum):
    ALL = "all"
    LOW = "low"
    OUT = "out"


@dataclass(frozen=True)
class VariantFilter:
    """Criteria for browsing variants.  Unset fields match everything."""

    search: str | None = None
    category_id: int | None = None
    perfume_id: int | None = None
    barcode: str | None = None
    active_only: bool = False
    in_stock_only: bool = False
    stock_level: StockLevel = StockLevel.ALL

    def matches(self, variant: Variant, category_id: int | None = None) -> bool:
        """*category_id* is the category of the variant's perfume."""
        if self.perfume_id is not None and variant.perfume_id != self.perfume_id:
            return False
        if self.category_id is not None and category_id != self.category_id:
            return False
        if self.barcode and variant.barcode != self.barcode:
            return False
        if self.search:
            needle = self.search.strip().lower()
            haystacks = (variant.perfume_name, variant.sku, variant.barcode)
            if not any(needle in h.lower() for h in haystacks):
                return False
        if self.active_only and not variant.is_active:
            return False
        if self.in_stock_only and not variant.is_in_stock:
            return False
        if self.stock_level is StockLevel.LOW and not variant.is_low_stock:
            return False
        if self.stock_level is StockLevel.OUT and variant.stock_qty != 0:
            return False
        return True


# POS browsing only offers what can actually be sold right now.
SELLABLE = VariantFilter(active_only=True, in_stock_only=True)


@dataclass(frozen=True)
class DateRange:
    """Inclusive creation-time window."""

    start: datetime | None = None
    end: datetime | None = None

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True
