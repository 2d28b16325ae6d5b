"""Domain -> DTO mapping shared by the handlers."""

from __future__ import annotations

from datetime import datetime

from perfume_pos.application.dto import (
    ExchangeItemDTO,
    PurchaseDTO,
    PurchaseItemDTO,
    ReturnDTO,
    ReturnItemDTO,
    SaleDTO,
    SaleLineItemDTO,
    VariantDTO,
)
from perfume_pos.domain.model.catalog import Variant
from perfume_pos.domain.model.purchase import Purchase
from perfume_pos.domain.model.returns import ExchangeItem, Return, ReturnItem
from perfume_pos.domain.model.sale import Sale
from perfume_pos.domain.model.value_objects import quantize


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M UTC")


def variant_to_dto(variant: Variant) -> VariantDTO:
    return VariantDTO(
        id=variant.id,
        perfume_id=variant.perfume_id,
        label=variant.label,
        sku=variant.sku,
        barcode=variant.barcode,
        price=variant.price.to_wire(),
        stock_qty=variant.stock_qty,
        low_stock_threshold=variant.low_stock_threshold,
        is_in_stock=variant.is_in_stock,
        is_low_stock=variant.is_low_stock,
        is_active=variant.is_active,
    )


def sale_to_dto(sale: Sale, has_return: bool = False) -> SaleDTO:
    return SaleDTO(
        id=sale.id,
        items=[
            SaleLineItemDTO(
                id=item.id,
                variant_id=item.variant_id,
                variant_label=item.variant_label,
                sku=item.sku,
                quantity=item.quantity.value,
                unit_price=item.unit_price.to_wire(),
                subtotal=item.subtotal.to_wire(),
            )
            for item in sale.items
        ],
        total_amount=sale.total_amount.to_wire(),
        payment_method=sale.payment_method.value,
        payment_label=sale.payment_method.label,
        cashier_name=sale.cashier_name,
        created_at=format_timestamp(sale.created_at),
        item_count=sale.item_count,
        has_return=has_return,
    )


def return_item_to_dto(item: ReturnItem) -> ReturnItemDTO:
    return ReturnItemDTO(
        id=item.id,
        sale_item_id=item.sale_item_id,
        variant_id=item.variant_id,
        variant_label=item.variant_label,
        quantity=item.quantity.value,
        unit_price=item.unit_price.to_wire(),
        subtotal=item.subtotal.to_wire(),
    )


def exchange_item_to_dto(item: ExchangeItem) -> ExchangeItemDTO:
    return ExchangeItemDTO(
        variant_id=item.variant_id,
        variant_label=item.variant_label,
        quantity=item.quantity.value,
        unit_price=item.unit_price.to_wire(),
        subtotal=item.subtotal.to_wire(),
    )


def return_to_dto(record: Return) -> ReturnDTO:
    return ReturnDTO(
        id=record.id,
        sale_id=record.sale_id,
        return_items=[return_item_to_dto(i) for i in record.return_items],
        exchange_items=[exchange_item_to_dto(i) for i in record.exchange_items],
        return_total=record.return_total.to_wire(),
        exchange_total=record.exchange_total.to_wire(),
        difference=str(quantize(record.difference)),
        settlement=record.settlement.value,
        operation_type=record.operation_type.value,
        operation_label=record.operation_type.label,
        reason=record.reason.value,
        reason_label=record.reason.label,
        payment_method=record.payment_method.value,
        payment_label=record.payment_method.label,
        cashier_name=record.cashier_name,
        notes=record.notes,
        created_at=format_timestamp(record.created_at),
    )


def purchase_to_dto(purchase: Purchase) -> PurchaseDTO:
    return PurchaseDTO(
        id=purchase.id,
        supplier_name=purchase.supplier_name,
        items=[
            PurchaseItemDTO(
                variant_id=item.variant_id,
                variant_label=item.variant_label,
                quantity=item.quantity.value,
                unit_cost=item.unit_cost.to_wire(),
                subtotal=item.subtotal.to_wire(),
            )
            for item in purchase.items
        ],
        total_amount=purchase.total_amount.to_wire(),
        notes=purchase.notes,
        created_at=format_timestamp(purchase.created_at),
    )
