"""CLI commands for stock review and supplier receipts."""

from __future__ import annotations

import click

from perfume_pos.application.dto import PurchaseItemSpec
from perfume_pos.application.list_purchases import ListPurchasesHandler
from perfume_pos.application.receive_purchase import ReceivePurchaseHandler
from perfume_pos.application.show_stock import ShowStockHandler
from perfume_pos.domain.exceptions import DomainException
from perfume_pos.domain.repository.filters import StockLevel, VariantFilter
from perfume_pos.infrastructure.bootstrap import catalog_repository, purchase_repository
from perfume_pos.infrastructure.cli.options import (
    date_option_from,
    date_option_to,
    parse_pairs,
    parse_purchase_items,
    period,
)
from perfume_pos.infrastructure.config import Settings


@click.command("show")
@click.option("--level", type=click.Choice([s.value for s in StockLevel]), default="all",
              show_default=True, help="Only low or out-of-stock variants.")
@click.option("--search", default=None, help="Perfume name, SKU or barcode.")
@click.option("--category", "category_id", type=int, default=None, help="Category ID.")
@click.pass_obj
def stock_show(settings: Settings, level: str, search: str | None, category_id: int | None) -> None:
    """Show stock levels."""
    variant_filter = VariantFilter(
        search=search, category_id=category_id, stock_level=StockLevel(level)
    )

    try:
        report = ShowStockHandler(catalog_repository(settings)).handle(variant_filter)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    stats = report.stats
    click.echo(
        f"{stats.total_variants} variant(s), {stats.low_stock} low, "
        f"{stats.out_of_stock} out of stock, value {stats.total_value} MAD"
    )
    if not report.lines:
        click.echo("No variants match.")
        return

    click.echo(f"{'ID':<5} {'Product':<28} {'SKU':<14} {'Price':>10} {'Stock':>6}  Status")
    click.echo("-" * 76)
    for line in report.lines:
        if not line.is_in_stock:
            status = "OUT"
        elif line.is_low_stock:
            status = "LOW"
        else:
            status = ""
        click.echo(
            f"{line.id:<5} {line.label:<28} {line.sku:<14} {line.price:>10} "
            f"{line.stock_qty:>6}  {status}"
        )


@click.command("request")
@click.option("--items", required=True, help="Reorder quantities as 'VariantID:Qty,...'.")
@click.pass_obj
def stock_request(settings: Settings, items: str) -> None:
    """Summarise a restock request (nothing is recorded)."""
    quantities: dict[int, int] = {}
    for variant_id, qty in parse_pairs(items, "VariantID"):
        quantities[variant_id] = quantities.get(variant_id, 0) + qty

    try:
        request = ShowStockHandler(catalog_repository(settings)).restock_request(quantities)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for line in request.lines:
        click.echo(f"{line.variant_label:<28} in stock {line.current_stock:>4}  order {line.quantity:>4}")
    click.echo(f"Total to order: {request.total_units} unit(s)")


@click.command("receive")
@click.option("--supplier", required=True, help="Supplier name.")
@click.option("--items", required=True, help="Items as 'VariantID:Qty:UnitCost,...'.")
@click.option("--notes", default="", help="Free-text note.")
@click.pass_obj
def stock_receive(settings: Settings, supplier: str, items: str, notes: str) -> None:
    """Receive a supplier delivery (increments stock)."""
    specs = [
        PurchaseItemSpec(variant_id=v, quantity=q, unit_cost=cost)
        for v, q, cost in parse_purchase_items(items)
    ]
    handler = ReceivePurchaseHandler(
        purchase_repo=purchase_repository(settings),
        catalog_repo=catalog_repository(settings),
    )

    try:
        dto = handler.handle(supplier, specs, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase #{dto.id} from {dto.supplier_name} received, total {dto.total_amount} MAD")
    for item in dto.items:
        click.echo(f"  + {item.variant_label:<28} x{item.quantity}")


@click.command("purchases")
@date_option_from
@date_option_to
@click.pass_obj
def stock_purchases(settings: Settings, start, end) -> None:
    """List received purchases."""
    try:
        purchases = ListPurchasesHandler(purchase_repository(settings)).handle(period(start, end))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not purchases:
        click.echo("No purchases found.")
        return

    for dto in purchases:
        units = sum(item.quantity for item in dto.items)
        click.echo(
            f"#{dto.id:<5} {dto.created_at:<22} {dto.supplier_name:<20} "
            f"{units:>5} unit(s) {dto.total_amount:>10} MAD"
        )
