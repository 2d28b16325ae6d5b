import click

from perfume_pos.domain.exceptions import ConfigurationError
from perfume_pos.infrastructure.cli.catalog_commands import (
    catalog_categories,
    catalog_load,
    catalog_variants,
)
from perfume_pos.infrastructure.cli.return_commands import (
    return_create,
    return_eligible,
    return_list,
    return_preview,
    return_show,
)
from perfume_pos.infrastructure.cli.sale_commands import sale_create, sale_list, sale_show
from perfume_pos.infrastructure.cli.stock_commands import (
    stock_purchases,
    stock_receive,
    stock_request,
    stock_show,
)
from perfume_pos.infrastructure.config import Settings, configure_logging


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Perfume shop point of sale."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


@cli.group()
def catalog() -> None:
    """Browse the catalog."""


@cli.group()
def stock() -> None:
    """Review and receive stock."""


@cli.group()
def sale() -> None:
    """Record and review sales."""


@cli.group("return")
def return_() -> None:
    """Refunds and exchanges."""


# Register subcommands
catalog.add_command(catalog_categories)
catalog.add_command(catalog_load)
catalog.add_command(catalog_variants)
stock.add_command(stock_purchases)
stock.add_command(stock_receive)
stock.add_command(stock_request)
stock.add_command(stock_show)
sale.add_command(sale_create)
sale.add_command(sale_list)
sale.add_command(sale_show)
return_.add_command(return_create)
return_.add_command(return_eligible)
return_.add_command(return_list)
return_.add_command(return_preview)
return_.add_command(return_show)
