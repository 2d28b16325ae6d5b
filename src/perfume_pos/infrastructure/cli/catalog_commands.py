"""CLI commands for browsing and loading the catalog."""

from __future__ import annotations

import json

import click

from perfume_pos.application.browse_catalog import BrowseCatalogHandler
from perfume_pos.domain.exceptions import DomainException
from perfume_pos.domain.repository.filters import VariantFilter
from perfume_pos.infrastructure.bootstrap import catalog_repository
from perfume_pos.infrastructure.config import Settings


@click.command("categories")
@click.pass_obj
def catalog_categories(settings: Settings) -> None:
    """List categories."""
    try:
        categories = BrowseCatalogHandler(catalog_repository(settings)).categories()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not categories:
        click.echo("No categories found.")
        return

    for category in categories:
        click.echo(f"{category.id:<5} {category.name}")


@click.command("variants")
@click.option("--search", default=None, help="Perfume name, SKU or barcode.")
@click.option("--category", "category_id", type=int, default=None, help="Category ID.")
@click.option("--barcode", default=None, help="Exact barcode (scanner input).")
@click.option("--sellable", is_flag=True, default=False, help="Only active variants in stock.")
@click.pass_obj
def catalog_variants(
    settings: Settings,
    search: str | None,
    category_id: int | None,
    barcode: str | None,
    sellable: bool,
) -> None:
    """Browse variants."""
    handler = BrowseCatalogHandler(catalog_repository(settings))

    try:
        if sellable:
            variants = [
                v for v in handler.sellable(search=search, category_id=category_id)
                if not barcode or v.barcode == barcode
            ]
        else:
            variants = handler.variants(
                VariantFilter(search=search, category_id=category_id, barcode=barcode)
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not variants:
        click.echo("No variants found.")
        return

    click.echo(f"{'ID':<5} {'Product':<28} {'Price':>10} {'Stock':>6}")
    click.echo("-" * 52)
    for v in variants:
        click.echo(f"{v.id:<5} {v.label:<28} {v.price:>10} {v.stock_qty:>6}")


@click.command("load")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def catalog_load(settings: Settings, source) -> None:
    """Replace the catalog with the content of a JSON file."""
    try:
        data = json.load(source)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid catalog file: {exc}")

    try:
        count = catalog_repository(settings).replace_all(data)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Catalog loaded: {count} variant(s).")
