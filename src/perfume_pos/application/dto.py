"""Data Transfer Objects: plain containers that cross layer boundaries.

Money leaves the application layer as fixed-point strings ("149.99");
signed amounts carry their sign ("-20.00").  Front ends add the currency.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class SaleItemSpec:
    """Input: a variant and how many units the customer takes."""

    variant_id: int
    quantity: int


@dataclass(frozen=True)
class ReturnItemSpec:
    """Input: how many units of one sale line item come back."""

    sale_item_id: int
    quantity: int


@dataclass(frozen=True)
class ExchangeItemSpec:
    variant_id: int
    quantity: int


@dataclass(frozen=True)
class PurchaseItemSpec:
    variant_id: int
    quantity: int
    unit_cost: str


@dataclass(frozen=True)
class ReturnRequest:
    """Input: everything the return wizard collected before confirmation."""

    sale_id: int
    items: list[ReturnItemSpec]
    operation_type: str
    reason: str
    payment_method: str
    exchange_items: list[ExchangeItemSpec] = field(default_factory=list)
    notes: str = ""


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class VariantDTO:
    id: int
    perfume_id: int
    label: str
    sku: str
    barcode: str
    price: str
    stock_qty: int
    low_stock_threshold: int
    is_in_stock: bool
    is_low_stock: bool
    is_active: bool


@dataclass(frozen=True)
class SaleLineItemDTO:
    id: int
    variant_id: int
    variant_label: str
    sku: str
    quantity: int
    unit_price: str
    subtotal: str


@dataclass(frozen=True)
class SaleDTO:
    id: int
    items: list[SaleLineItemDTO]
    total_amount: str
    payment_method: str
    payment_label: str
    cashier_name: str
    created_at: str
    item_count: int
    has_return: bool = False


@dataclass(frozen=True)
class ReturnItemDTO:
    id: int
    sale_item_id: int
    variant_id: int
    variant_label: str
    quantity: int
    unit_price: str
    subtotal: str


@dataclass(frozen=True)
class ExchangeItemDTO:
    variant_id: int
    variant_label: str
    quantity: int
    unit_price: str
    subtotal: str


@dataclass(frozen=True)
class ReturnDTO:
    id: int
    sale_id: int
    return_items: list[ReturnItemDTO]
    exchange_items: list[ExchangeItemDTO]
    return_total: str
    exchange_total: str
    difference: str
    settlement: str
    operation_type: str
    operation_label: str
    reason: str
    reason_label: str
    payment_method: str
    payment_label: str
    cashier_name: str
    notes: str
    created_at: str


@dataclass(frozen=True)
class ReturnPreviewDTO:
    """Output: the summary screen of the return wizard (nothing committed)."""

    sale_id: int
    return_items: list[ReturnItemDTO]
    exchange_items: list[ExchangeItemDTO]
    return_total: str
    exchange_total: str
    difference: str
    settlement: str


@dataclass(frozen=True)
class PurchaseItemDTO:
    variant_id: int
    variant_label: str
    quantity: int
    unit_cost: str
    subtotal: str


@dataclass(frozen=True)
class PurchaseDTO:
    id: int
    supplier_name: str
    items: list[PurchaseItemDTO]
    total_amount: str
    notes: str
    created_at: str
