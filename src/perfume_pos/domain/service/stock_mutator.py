"""Domain service: Stock Mutator.

The single authority allowed to change ``Variant.stock_qty``.  Sales,
purchase receipts and return settlements all go through it, so the
non-negative invariant and the derived stock flags live in one place.

Every batch is applied in two phases:
  Phase 1 (``prepare``): load and validate every variant of the batch.
            Fails before any mutation.
  Phase 2 (``apply``): mutate and persist each variant with a
            conditional write against the quantity seen in phase 1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from perfume_pos.domain.exceptions import EntityNotFoundError, InsufficientStockError
from perfume_pos.domain.model.catalog import Variant
from perfume_pos.domain.repository.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)


@dataclass
class StockPlan:
    """Validated ``(variant, net delta)`` pairs, ready to apply."""

    entries: list[tuple[Variant, int]] = field(default_factory=list)

    def delta_for(self, variant_id: int) -> int:
        for variant, delta in self.entries:
            if variant.id == variant_id:
                return delta
        return 0


class StockMutator:

    def __init__(self, catalog_repo: CatalogRepository) -> None:
        self._catalog_repo = catalog_repo

    def adjust(self, variant_id: int, delta: int) -> Variant:
        """Apply ``stock_qty += delta`` to a single variant."""
        updated = self.adjust_many([(variant_id, delta)])
        if updated:
            return updated[0]
        variant = self._catalog_repo.get_variant(variant_id)
        if variant is None:
            raise EntityNotFoundError(f"Variant #{variant_id} not found")
        return variant

    def adjust_many(self, deltas: list[tuple[int, int]]) -> list[Variant]:
        """Apply a batch all-or-nothing; returns the updated variants."""
        return self.apply(self.prepare(deltas))

    def prepare(self, deltas: list[tuple[int, int]]) -> StockPlan:
        """Resolve and check every variant before anything is written.

        Deltas for the same variant are netted, so a batch that takes
        the same variant twice is checked against the combined amount.
        """
        net: dict[int, int] = {}
        for variant_id, delta in deltas:
            net[variant_id] = net.get(variant_id, 0) + delta

        plan = StockPlan()
        for variant_id, delta in net.items():
            variant = self._catalog_repo.get_variant(variant_id)
            if variant is None:
                raise EntityNotFoundError(f"Variant #{variant_id} not found")
            if variant.stock_qty + delta < 0:
                raise InsufficientStockError(
                    variant_id=variant.id,
                    label=variant.label,
                    requested=-delta,
                    available=variant.stock_qty,
                )
            if delta != 0:
                plan.entries.append((variant, delta))
        return plan

    def apply(self, plan: StockPlan) -> list[Variant]:
        now = datetime.now(timezone.utc)
        updated: list[Variant] = []
        for variant, delta in plan.entries:
            expected = variant.stock_qty
            variant.apply_stock_delta(delta, now)
            self._catalog_repo.write_variant_stock(variant, expected_qty=expected)
            logger.debug(
                "Stock of %s moved %+d (%d -> %d)",
                variant.label, delta, expected, variant.stock_qty,
            )
            updated.append(variant)
        return updated
