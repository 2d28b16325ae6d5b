"""Application service: Receive Purchase use case.

Records goods delivered by a supplier and adds them to stock.
"""

from __future__ import annotations

import logging

from perfume_pos.application.dto import PurchaseDTO, PurchaseItemSpec
from perfume_pos.application.mappers import purchase_to_dto
from perfume_pos.domain.exceptions import EntityNotFoundError, PersistenceError, ValidationError
from perfume_pos.domain.model.purchase import Purchase, PurchaseItem
from perfume_pos.domain.model.value_objects import Money, Quantity
from perfume_pos.domain.repository.catalog_repository import CatalogRepository
from perfume_pos.domain.repository.purchase_repository import PurchaseRepository
from perfume_pos.domain.service.stock_mutator import StockMutator

logger = logging.getLogger(__name__)


class ReceivePurchaseHandler:

    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        catalog_repo: CatalogRepository,
    ) -> None:
        self._purchase_repo = purchase_repo
        self._catalog_repo = catalog_repo

    def handle(
        self,
        supplier_name: str,
        item_specs: list[PurchaseItemSpec],
        notes: str = "",
    ) -> PurchaseDTO:
        if not item_specs:
            raise ValidationError("A purchase must contain at least one item")

        items: list[PurchaseItem] = []
        for spec in item_specs:
            quantity = Quantity(spec.quantity)
            variant = self._catalog_repo.get_variant(spec.variant_id)
            if variant is None:
                raise EntityNotFoundError(f"Variant #{spec.variant_id} not found")
            items.append(
                PurchaseItem(
                    variant_id=variant.id,
                    variant_label=variant.label,
                    quantity=quantity,
                    unit_cost=Money.of(spec.unit_cost),
                )
            )

        purchase = Purchase.create(
            purchase_id=self._purchase_repo.next_id(),
            supplier_name=supplier_name,
            items=items,
            notes=notes,
        )
        stock = StockMutator(self._catalog_repo)
        plan = stock.prepare([(item.variant_id, item.quantity.value) for item in items])
        try:
            stock.apply(plan)
        except PersistenceError:
            logger.error(
                "Stock write failed part-way through purchase #%d from %s; the "
                "purchase was not recorded, reconcile stock manually",
                purchase.id, purchase.supplier_name,
            )
            raise

        self._purchase_repo.append(purchase)

        logger.info(
            "Purchase #%d received from %s: total %s",
            purchase.id, purchase.supplier_name, purchase.total_amount,
        )
        return purchase_to_dto(purchase)
