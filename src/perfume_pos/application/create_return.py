"""Application service: Create Return use case (refund or exchange).

The return wizard (select sale -> select items -> choose operation ->
exchange items -> confirm) is driven by the front end.  Nothing is
written until ``handle()`` is called at confirmation, so abandoning the
wizard at any earlier step has no side effect.  ``preview()`` runs the
same validation and arithmetic for the summary screen without committing.

Validation order (each failure aborts everything):
  1. the sale exists
  2. the sale has no return yet
  3. at least one item is returned
  4. every item belongs to the sale and, pooled per sale line item,
     ``0 < quantity <= sold``
  5. for an exchange: at least one exchange item, each in stock
"""

from __future__ import annotations

import logging

from perfume_pos.application.dto import ReturnDTO, ReturnPreviewDTO, ReturnRequest
from perfume_pos.application.mappers import (
    exchange_item_to_dto,
    return_item_to_dto,
    return_to_dto,
)
from perfume_pos.domain.exceptions import (
    AlreadyReturnedError,
    EmptyExchangeError,
    EmptyReturnError,
    EntityNotFoundError,
    InsufficientStockError,
    OverReturnError,
    PersistenceError,
    SaleNotFoundError,
)
from perfume_pos.domain.model.returns import (
    ExchangeItem,
    OperationType,
    Return,
    ReturnItem,
    ReturnReason,
    Settlement,
    compute_totals,
)
from perfume_pos.domain.model.sale import DEFAULT_CASHIER, PaymentMethod, Sale
from perfume_pos.domain.model.value_objects import Quantity, parse_choice, quantize
from perfume_pos.domain.repository.catalog_repository import CatalogRepository
from perfume_pos.domain.repository.return_repository import ReturnRepository
from perfume_pos.domain.repository.sale_repository import SaleRepository
from perfume_pos.domain.service.stock_mutator import StockMutator

logger = logging.getLogger(__name__)


class CreateReturnHandler:

    def __init__(
        self,
        return_repo: ReturnRepository,
        sale_repo: SaleRepository,
        catalog_repo: CatalogRepository,
        default_cashier: str = DEFAULT_CASHIER,
    ) -> None:
        self._return_repo = return_repo
        self._sale_repo = sale_repo
        self._catalog_repo = catalog_repo
        self._default_cashier = default_cashier

    def handle(self, request: ReturnRequest) -> ReturnDTO:
        """Validate, record the return, then move stock both ways."""
        operation, reason, method = self._parse_choices(request)
        sale, return_items, exchange_items = self._validate(request, operation)

        stock = StockMutator(self._catalog_repo)
        deltas = [(item.variant_id, item.quantity.value) for item in return_items]
        deltas += [(item.variant_id, -item.quantity.value) for item in exchange_items]
        plan = stock.prepare(deltas)

        record = Return.create(
            return_id=self._return_repo.next_id(),
            sale_id=sale.id,
            return_items=return_items,
            operation_type=operation,
            reason=reason,
            payment_method=method,
            exchange_items=exchange_items,
            cashier_name=self._default_cashier,
            notes=request.notes,
        )
        # Raises AlreadyReturnedError if another submission got there first.
        self._return_repo.append(record)

        try:
            stock.apply(plan)
        except PersistenceError:
            logger.error(
                "Return #%d for sale #%d was recorded but its stock movements "
                "failed; reconcile stock manually",
                record.id, sale.id,
            )
            raise

        logger.info(
            "Return #%d committed for sale #%d (%s): returned %s, exchanged %s, "
            "difference %s",
            record.id, sale.id, operation.value, record.return_total,
            record.exchange_total, quantize(record.difference),
        )
        return return_to_dto(record)

    def preview(self, request: ReturnRequest) -> ReturnPreviewDTO:
        """Compute the summary of a draft return.  Nothing is persisted."""
        operation, _, _ = self._parse_choices(request)
        sale, return_items, exchange_items = self._validate(request, operation)
        return_total, exchange_total, difference = compute_totals(
            return_items, exchange_items
        )
        return ReturnPreviewDTO(
            sale_id=sale.id,
            return_items=[return_item_to_dto(i) for i in return_items],
            exchange_items=[exchange_item_to_dto(i) for i in exchange_items],
            return_total=return_total.to_wire(),
            exchange_total=exchange_total.to_wire(),
            difference=str(quantize(difference)),
            settlement=Settlement.from_difference(difference).value,
        )

    # --- Validation -----------------------------------------------------------

    @staticmethod
    def _parse_choices(
        request: ReturnRequest,
    ) -> tuple[OperationType, ReturnReason, PaymentMethod]:
        return (
            parse_choice(OperationType, request.operation_type, "operation type"),
            parse_choice(ReturnReason, request.reason, "return reason"),
            parse_choice(PaymentMethod, request.payment_method, "payment method"),
        )

    def _validate(
        self, request: ReturnRequest, operation: OperationType
    ) -> tuple[Sale, list[ReturnItem], list[ExchangeItem]]:
        sale = self._sale_repo.get_by_id(request.sale_id)
        if sale is None:
            raise SaleNotFoundError(request.sale_id)

        if self._return_repo.find_for_sale(sale.id):
            raise AlreadyReturnedError(sale.id)

        if not request.items:
            raise EmptyReturnError()

        return_items = self._build_return_items(sale, request)

        exchange_items: list[ExchangeItem] = []
        if operation is OperationType.EXCHANGE:
            exchange_items = self._build_exchange_items(request)
        elif request.exchange_items:
            logger.debug("Ignoring exchange items on refund for sale #%d", sale.id)

        return sale, return_items, exchange_items

    @staticmethod
    def _build_return_items(sale: Sale, request: ReturnRequest) -> list[ReturnItem]:
        # Pool per sale line item so two request lines cannot together
        # exceed what was sold.
        pooled: dict[int, int] = {}
        for spec in request.items:
            line = sale.find_item(spec.sale_item_id)
            if line is None:
                raise EntityNotFoundError(
                    f"Sale item #{spec.sale_item_id} is not part of sale #{sale.id}"
                )
            if spec.quantity <= 0:
                raise OverReturnError(spec.sale_item_id, spec.quantity, line.quantity.value)
            pooled[spec.sale_item_id] = pooled.get(spec.sale_item_id, 0) + spec.quantity

        items: list[ReturnItem] = []
        for index, (sale_item_id, quantity) in enumerate(pooled.items(), start=1):
            line = sale.find_item(sale_item_id)
            sold = line.quantity.value
            if quantity > sold:
                raise OverReturnError(sale_item_id, quantity, sold)
            items.append(
                ReturnItem(
                    id=index,
                    sale_item_id=line.id,
                    variant_id=line.variant_id,
                    variant_label=line.variant_label,
                    quantity=Quantity(quantity),
                    unit_price=line.unit_price,  # price paid, not today's price
                )
            )
        return items

    def _build_exchange_items(self, request: ReturnRequest) -> list[ExchangeItem]:
        if not request.exchange_items:
            raise EmptyExchangeError()

        requested: dict[int, int] = {}
        for spec in request.exchange_items:
            Quantity(spec.quantity)
            requested[spec.variant_id] = requested.get(spec.variant_id, 0) + spec.quantity

        items: list[ExchangeItem] = []
        for variant_id, quantity in requested.items():
            variant = self._catalog_repo.get_variant(variant_id)
            if variant is None:
                raise EntityNotFoundError(f"Variant #{variant_id} not found")
            if variant.stock_qty < quantity:
                raise InsufficientStockError(
                    variant_id=variant.id,
                    label=variant.label,
                    requested=quantity,
                    available=variant.stock_qty,
                )
            items.append(
                ExchangeItem(
                    variant_id=variant.id,
                    variant_label=variant.label,
                    quantity=Quantity(quantity),
                    unit_price=variant.price,  # today's price
                )
            )
        return items
