"""Application service: Create Sale use case (checkout).

Orchestrates the catalog lookup, the Sale aggregate and the
StockMutator.  Prices always come from the catalog, never from the
caller, and nothing is written unless every line passes its stock check.
"""

from __future__ import annotations

import logging

from perfume_pos.application.dto import SaleDTO, SaleItemSpec
from perfume_pos.application.mappers import sale_to_dto
from perfume_pos.domain.exceptions import (
    EmptyCartError,
    EntityNotFoundError,
    PersistenceError,
)
from perfume_pos.domain.model.sale import DEFAULT_CASHIER, PaymentMethod, Sale, SaleLineItem
from perfume_pos.domain.model.value_objects import Quantity, parse_choice
from perfume_pos.domain.repository.catalog_repository import CatalogRepository
from perfume_pos.domain.repository.sale_repository import SaleRepository
from perfume_pos.domain.service.stock_mutator import StockMutator

logger = logging.getLogger(__name__)


class CreateSaleHandler:

    def __init__(
        self,
        sale_repo: SaleRepository,
        catalog_repo: CatalogRepository,
        default_cashier: str = DEFAULT_CASHIER,
    ) -> None:
        self._sale_repo = sale_repo
        self._catalog_repo = catalog_repo
        self._default_cashier = default_cashier

    def handle(
        self,
        item_specs: list[SaleItemSpec],
        payment_method: str | PaymentMethod,
        cashier_name: str | None = None,
    ) -> SaleDTO:
        """Commit a new sale.

        Steps:
        1. Reject an empty cart and invalid payment methods.
        2. Resolve each variant and snapshot its current price.
        3. Check stock for the whole batch (no partial sale).
        4. Decrement stock, then append the sale to the ledger.
        """
        if not item_specs:
            raise EmptyCartError()
        method = parse_choice(PaymentMethod, payment_method, "payment method")

        line_items: list[SaleLineItem] = []
        for index, spec in enumerate(item_specs, start=1):
            quantity = Quantity(spec.quantity)
            variant = self._catalog_repo.get_variant(spec.variant_id)
            if variant is None:
                raise EntityNotFoundError(f"Variant #{spec.variant_id} not found")
            line_items.append(
                SaleLineItem(
                    id=index,
                    variant_id=variant.id,
                    variant_label=variant.label,
                    sku=variant.sku,
                    quantity=quantity,
                    unit_price=variant.price,  # <-- price snapshot
                )
            )

        stock = StockMutator(self._catalog_repo)
        plan = stock.prepare([(item.variant_id, -item.quantity.value) for item in line_items])

        sale = Sale.create(
            sale_id=self._sale_repo.next_id(),
            items=line_items,
            payment_method=method,
            cashier_name=cashier_name or self._default_cashier,
        )

        try:
            stock.apply(plan)
        except PersistenceError:
            logger.error(
                "Stock write failed part-way through sale #%d; the sale was not "
                "recorded and earlier lines may already be decremented, reconcile "
                "stock manually",
                sale.id,
            )
            raise

        try:
            self._sale_repo.append(sale)
        except PersistenceError:
            logger.error(
                "Stock was decremented for sale #%d but the sale could not be "
                "recorded; reconcile stock manually",
                sale.id,
            )
            raise

        logger.info(
            "Sale #%d committed: %d item(s), total %s, paid by %s",
            sale.id, sale.item_count, sale.total_amount, method.value,
        )
        return sale_to_dto(sale)
