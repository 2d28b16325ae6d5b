"""CLI commands for the Sale ledger."""

from __future__ import annotations

import click

from perfume_pos.application.create_sale import CreateSaleHandler
from perfume_pos.application.dto import SaleDTO, SaleItemSpec
from perfume_pos.application.sales_history import ListSalesHandler, ShowSaleHandler
from perfume_pos.domain.exceptions import DomainException
from perfume_pos.domain.model.sale import PaymentMethod
from perfume_pos.infrastructure.bootstrap import (
    catalog_repository,
    return_repository,
    sale_repository,
)
from perfume_pos.infrastructure.cli.options import (
    date_option_from,
    date_option_to,
    parse_pairs,
    period,
)
from perfume_pos.infrastructure.config import Settings

PAYMENT_CHOICES = click.Choice([m.value for m in PaymentMethod])


def display_sale(dto: SaleDTO) -> None:
    """Shared formatting for displaying a sale."""
    flag = "  [returned]" if dto.has_return else ""
    click.echo(f"Sale #{dto.id}{flag}")
    click.echo(f"Cashier: {dto.cashier_name}   Payment: {dto.payment_label}")
    click.echo(f"Created: {dto.created_at}")
    click.echo()
    click.echo(f"  {'#':>3} {'Product':<28} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*60}")
    for item in dto.items:
        click.echo(
            f"  {item.id:>3} {item.variant_label:<28} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.subtotal:>10}"
        )
    click.echo(f"  {'-'*60}")
    click.echo(f"  {'Total (MAD)':<38} {dto.total_amount:>22}")


@click.command("create")
@click.option("--items", required=True, help="Items as 'VariantID:Qty,VariantID:Qty'.")
@click.option("--payment", type=PAYMENT_CHOICES, default="cash", show_default=True)
@click.option("--cashier", default=None, help="Cashier label (defaults to POS_CASHIER_NAME).")
@click.pass_obj
def sale_create(settings: Settings, items: str, payment: str, cashier: str | None) -> None:
    """Check out a sale and decrement stock."""
    specs = [SaleItemSpec(variant_id=v, quantity=q) for v, q in parse_pairs(items, "VariantID")]

    handler = CreateSaleHandler(
        sale_repo=sale_repository(settings),
        catalog_repo=catalog_repository(settings),
        default_cashier=settings.cashier_name,
    )

    try:
        dto = handler.handle(specs, payment, cashier)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Sale recorded.")
    display_sale(dto)


@click.command("show")
@click.option("--id", "sale_id", required=True, type=int, help="Sale ID to display.")
@click.pass_obj
def sale_show(settings: Settings, sale_id: int) -> None:
    """Show a sale and any return made against it."""
    handler = ShowSaleHandler(sale_repository(settings), return_repository(settings))

    try:
        detail = handler.handle(sale_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_sale(detail.sale)
    for ret in detail.returns:
        click.echo()
        click.echo(
            f"Return #{ret.id}: {ret.operation_label}, {ret.reason_label}, "
            f"difference {ret.difference} MAD"
        )


@click.command("list")
@date_option_from
@date_option_to
@click.pass_obj
def sale_list(settings: Settings, start, end) -> None:
    """List sales with revenue statistics."""
    handler = ListSalesHandler(sale_repository(settings), return_repository(settings))

    try:
        history = handler.handle(period(start, end))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not history.sales:
        click.echo("No sales found.")
        return

    click.echo(f"{'ID':<6} {'Date':<22} {'Items':>6} {'Payment':<10} {'Total':>10}  Return")
    click.echo("-" * 66)
    for sale in history.sales:
        click.echo(
            f"{sale.id:<6} {sale.created_at:<22} {sale.item_count:>6} "
            f"{sale.payment_label:<10} {sale.total_amount:>10}  {'yes' if sale.has_return else ''}"
        )
    stats = history.stats
    click.echo("-" * 66)
    click.echo(
        f"{stats.sale_count} sale(s), {stats.items_sold} item(s), revenue {stats.revenue} MAD, "
        f"average {stats.average_sale} MAD"
    )
