"""CLI commands for the returns / exchange workflow."""

from __future__ import annotations

import click

from perfume_pos.application.create_return import CreateReturnHandler
from perfume_pos.application.dto import ExchangeItemSpec, ReturnDTO, ReturnItemSpec, ReturnRequest
from perfume_pos.application.returns_history import ListReturnsHandler, ShowReturnHandler
from perfume_pos.application.sales_history import ListReturnableSalesHandler
from perfume_pos.domain.exceptions import DomainException
from perfume_pos.domain.model.returns import OperationType, ReturnReason
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
from perfume_pos.infrastructure.cli.sale_commands import PAYMENT_CHOICES
from perfume_pos.infrastructure.config import Settings

_SETTLEMENT_TEXT = {
    "refund_due": "Refund to customer",
    "customer_owes": "Customer pays",
    "settled": "Settled even",
}


def _request_options(func):
    """Options shared by ``return create`` and ``return preview``."""
    decorators = [
        click.option("--sale", "sale_id", required=True, type=int, help="Sale to return against."),
        click.option("--items", required=True, help="Returned items as 'SaleItemID:Qty,...'."),
        click.option(
            "--operation", type=click.Choice([o.value for o in OperationType]),
            default="refund", show_default=True,
        ),
        click.option(
            "--reason", type=click.Choice([r.value for r in ReturnReason]),
            default="customer_request", show_default=True,
        ),
        click.option("--payment", type=PAYMENT_CHOICES, default="cash", show_default=True),
        click.option("--exchange", default=None, help="Exchange items as 'VariantID:Qty,...'."),
        click.option("--notes", default="", help="Free-text note."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _build_request(sale_id, items, operation, reason, payment, exchange, notes) -> ReturnRequest:
    return ReturnRequest(
        sale_id=sale_id,
        items=[ReturnItemSpec(sale_item_id=s, quantity=q) for s, q in parse_pairs(items, "SaleItemID")],
        operation_type=operation,
        reason=reason,
        payment_method=payment,
        exchange_items=[
            ExchangeItemSpec(variant_id=v, quantity=q)
            for v, q in parse_pairs(exchange or "", "VariantID")
        ],
        notes=notes,
    )


def _handler(settings: Settings) -> CreateReturnHandler:
    return CreateReturnHandler(
        return_repo=return_repository(settings),
        sale_repo=sale_repository(settings),
        catalog_repo=catalog_repository(settings),
        default_cashier=settings.cashier_name,
    )


def _display_totals(return_total: str, exchange_total: str, difference: str, settlement: str) -> None:
    click.echo(f"  {'Returned':<20} {return_total:>12} MAD")
    click.echo(f"  {'Exchanged':<20} {exchange_total:>12} MAD")
    click.echo(f"  {_SETTLEMENT_TEXT[settlement]:<20} {difference:>12} MAD")


def display_return(dto: ReturnDTO) -> None:
    click.echo(f"Return #{dto.id} for sale #{dto.sale_id}  ({dto.operation_label})")
    click.echo(f"Reason: {dto.reason_label}   Settlement: {dto.payment_label}")
    click.echo(f"Cashier: {dto.cashier_name}   Created: {dto.created_at}")
    if dto.notes:
        click.echo(f"Notes: {dto.notes}")
    click.echo()
    for item in dto.return_items:
        click.echo(f"  - {item.variant_label:<28} x{item.quantity:<3} {item.subtotal:>10}")
    for item in dto.exchange_items:
        click.echo(f"  + {item.variant_label:<28} x{item.quantity:<3} {item.subtotal:>10}")
    click.echo()
    _display_totals(dto.return_total, dto.exchange_total, dto.difference, dto.settlement)


@click.command("create")
@_request_options
@click.pass_obj
def return_create(settings: Settings, **options) -> None:
    """Record a refund or exchange against a sale."""
    request = _build_request(**options)

    try:
        dto = _handler(settings).handle(request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Return recorded.")
    display_return(dto)


@click.command("preview")
@_request_options
@click.pass_obj
def return_preview(settings: Settings, **options) -> None:
    """Show what a return would settle, without recording it."""
    request = _build_request(**options)

    try:
        preview = _handler(settings).preview(request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Preview for sale #{preview.sale_id} (nothing recorded)")
    _display_totals(
        preview.return_total, preview.exchange_total, preview.difference, preview.settlement
    )


@click.command("show")
@click.option("--id", "return_id", required=True, type=int, help="Return ID to display.")
@click.pass_obj
def return_show(settings: Settings, return_id: int) -> None:
    """Show one return."""
    try:
        dto = ShowReturnHandler(return_repository(settings)).handle(return_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_return(dto)


@click.command("list")
@date_option_from
@date_option_to
@click.pass_obj
def return_list(settings: Settings, start, end) -> None:
    """List returns with refund statistics."""
    try:
        history = ListReturnsHandler(return_repository(settings)).handle(period(start, end))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not history.returns:
        click.echo("No returns found.")
        return

    click.echo(f"{'ID':<6} {'Sale':<6} {'Operation':<14} {'Reason':<20} {'Difference':>12}")
    click.echo("-" * 62)
    for ret in history.returns:
        click.echo(
            f"{ret.id:<6} {ret.sale_id:<6} {ret.operation_label:<14} "
            f"{ret.reason_label:<20} {ret.difference:>12}"
        )
    stats = history.stats
    click.echo("-" * 62)
    click.echo(
        f"{stats.return_count} return(s), {stats.exchange_count} exchange(s), "
        f"refunded {stats.total_refunded} MAD, net {stats.net_difference} MAD"
    )


@click.command("eligible")
@click.option("--search", default=None, help="Sale number or cashier name.")
@click.option("--all", "include_returned", is_flag=True, default=False,
              help="Also list sales that already have a return.")
@click.pass_obj
def return_eligible(settings: Settings, search: str | None, include_returned: bool) -> None:
    """List sales that can still be returned."""
    handler = ListReturnableSalesHandler(sale_repository(settings), return_repository(settings))

    try:
        sales = handler.handle(search, include_returned=include_returned)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not sales:
        click.echo("No matching sales.")
        return

    for sale in sales:
        flag = "  [returned]" if sale.has_return else ""
        click.echo(
            f"#{sale.id:<5} {sale.created_at:<22} {sale.cashier_name:<20} "
            f"{sale.total_amount:>10} MAD{flag}"
        )
