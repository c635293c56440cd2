from pathlib import Path

import click

from cafe.infrastructure.cli.invoice_commands import (
    dashboard,
    invoice_delete,
    invoice_export,
    invoice_generate,
    invoice_list,
    invoice_show,
    invoice_status,
)
from cafe.infrastructure.cli.order_commands import (
    order_create,
    order_delete,
    order_list,
    order_show,
    order_status,
    order_update,
)
from cafe.infrastructure.cli.product_commands import (
    product_add,
    product_delete,
    product_export,
    product_import,
    product_list,
    product_update,
    seed,
)
from cafe.infrastructure.cli.stock_commands import stock_adjust, stock_history
from cafe.infrastructure.config import Settings, get_settings
from cafe.infrastructure.logger import setup_logger


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Store directory (overrides CAFE_DATA_DIR).")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None) -> None:
    """Café Parisien back office"""
    settings = ctx.obj if isinstance(ctx.obj, Settings) else get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    setup_logger(settings=settings)
    ctx.obj = settings


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def stock() -> None:
    """Adjust stock and read the stock ledger."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def invoice() -> None:
    """Manage invoices."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_delete)
product.add_command(product_export)
product.add_command(product_import)
product.add_command(product_list)
product.add_command(product_update)
stock.add_command(stock_adjust)
stock.add_command(stock_history)
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_update)
invoice.add_command(invoice_delete)
invoice.add_command(invoice_export)
invoice.add_command(invoice_generate)
invoice.add_command(invoice_list)
invoice.add_command(invoice_show)
invoice.add_command(invoice_status)
cli.add_command(dashboard)
cli.add_command(seed)
