"""Return aggregate: a refund or exchange settled against one prior Sale.

Returned goods are valued at the price captured on the original sale;
exchange goods are valued at today's catalog price.  ``difference`` is
``return_total - exchange_total``: positive means the shop pays the
customer back, negative means the customer pays the balance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from perfume_pos.domain.exceptions import (
    EmptyExchangeError,
    EmptyReturnError,
    ValidationError,
)
from perfume_pos.domain.model.sale import DEFAULT_CASHIER, PaymentMethod
from perfume_pos.domain.model.value_objects import Money, Quantity


class OperationType(Enum):
    REFUND = "refund"
    EXCHANGE = "exchange"

    @property
    def label(self) -> str:
        return "Remboursement" if self is OperationType.REFUND else "Échange"


class ReturnReason(Enum):
    DEFECTIVE = "defective"
    WRONG_ITEM = "wrong_item"
    CUSTOMER_REQUEST = "customer_request"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _REASON_LABELS[self]


_REASON_LABELS = {
    ReturnReason.DEFECTIVE: "Produit défectueux",
    ReturnReason.WRONG_ITEM: "Erreur de commande",
    ReturnReason.CUSTOMER_REQUEST: "Demande du client",
    ReturnReason.OTHER: "Autre",
}


class Settlement(Enum):
    REFUND_DUE = "refund_due"        # shop owes the customer
    CUSTOMER_OWES = "customer_owes"
    SETTLED = "settled"

    @staticmethod
    def from_difference(difference: Decimal) -> Settlement:
        if difference > 0:
            return Settlement.REFUND_DUE
        if difference < 0:
            return Settlement.CUSTOMER_OWES
        return Settlement.SETTLED


@dataclass(frozen=True)
class ReturnItem:
    """A quantity taken back from one sale line item."""

    id: int
    sale_item_id: int
    variant_id: int
    variant_label: str
    quantity: Quantity
    unit_price: Money  # copied from the sale line item

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class ExchangeItem:
    """A variant handed out in exchange, priced at return time."""

    variant_id: int
    variant_label: str
    quantity: Quantity
    unit_price: Money

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


def compute_totals(
    return_items, exchange_items
) -> tuple[Money, Money, Decimal]:
    """Return ``(return_total, exchange_total, difference)``."""
    return_total = Money.total(item.subtotal for item in return_items)
    exchange_total = Money.total(item.subtotal for item in exchange_items)
    return return_total, exchange_total, return_total.difference(exchange_total)


@dataclass(frozen=True)
class Return:
    """Aggregate root for returns.  Immutable once created."""

    id: int
    sale_id: int
    return_items: tuple[ReturnItem, ...]
    operation_type: OperationType
    reason: ReturnReason
    payment_method: PaymentMethod
    exchange_items: tuple[ExchangeItem, ...] = ()
    cashier_name: str = DEFAULT_CASHIER
    notes: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        return_id: int,
        sale_id: int,
        return_items: list[ReturnItem],
        operation_type: OperationType,
        reason: ReturnReason,
        payment_method: PaymentMethod,
        exchange_items: list[ExchangeItem] | None = None,
        cashier_name: str | None = None,
        notes: str = "",
        created_at: datetime | None = None,
    ) -> Return:
        if not return_items:
            raise EmptyReturnError()
        exchange_items = list(exchange_items or [])
        if operation_type is OperationType.EXCHANGE and not exchange_items:
            raise EmptyExchangeError()
        if operation_type is OperationType.REFUND and exchange_items:
            raise ValidationError("A refund cannot carry exchange items")

        return Return(
            id=return_id,
            sale_id=sale_id,
            return_items=tuple(return_items),
            operation_type=operation_type,
            reason=reason,
            payment_method=payment_method,
            exchange_items=tuple(exchange_items),
            cashier_name=(cashier_name or "").strip() or DEFAULT_CASHIER,
            notes=(notes or "").strip(),
            created_at=created_at or datetime.now(timezone.utc),
        )

    # --- Computed properties --------------------------------------------------

    @property
    def return_total(self) -> Money:
        return Money.total(item.subtotal for item in self.return_items)

    @property
    def exchange_total(self) -> Money:
        if self.operation_type is OperationType.REFUND:
            return Money.zero()
        return Money.total(item.subtotal for item in self.exchange_items)

    @property
    def difference(self) -> Decimal:
        return self.return_total.difference(self.exchange_total)

    @property
    def settlement(self) -> Settlement:
        return Settlement.from_difference(self.difference)
