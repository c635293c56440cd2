"""CLI commands for the product catalog."""

from __future__ import annotations

from pathlib import Path

import click

from cafe.application.product_service import STOCK_LEVELS
from cafe.domain.exceptions import DomainException
from cafe.domain.model.product import PRODUCT_CATEGORIES
from cafe.infrastructure.bootstrap import app_context
from cafe.infrastructure.config import Settings
from cafe.infrastructure.demo_data import seed_demo_products
from cafe.infrastructure.product_csv import export_products, import_products

_CATEGORY = click.Choice(PRODUCT_CATEGORIES, case_sensitive=False)


def _canonical_category(value: str | None) -> str | None:
    if value is None:
        return None
    for category in PRODUCT_CATEGORIES:
        if category.lower() == value.lower():
            return category
    return value


@click.command("list")
@click.option("--category", type=_CATEGORY, default=None, help="Only this category.")
@click.option("--stock", "stock_level", type=click.Choice(STOCK_LEVELS), default=None,
              help="'low' (at or under threshold) or 'out' (none left).")
@click.option("--search", "term", default=None, help="Text to look for in name or description.")
@click.pass_obj
def product_list(settings: Settings, category: str | None, stock_level: str | None, term: str | None) -> None:
    """List products in the catalog."""
    try:
        with app_context(settings) as ctx:
            products = ctx.products.search(_canonical_category(category), stock_level, term)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<5} {'Name':<24} {'Category':<12} {'Price':>10} {'Stock':>6} {'Alert':>6}")
    click.echo("-" * 68)
    for p in products:
        flag = " !" if p.is_low_stock else ""
        click.echo(
            f"{p.id:<5} {p.name:<24} {p.category:<12} {str(p.price):>10} "
            f"{p.quantity:>6} {p.threshold:>6}{flag}"
        )


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--category", required=True, type=_CATEGORY, help="Product category.")
@click.option("--price", required=True, help="Selling price (e.g. 2.50).")
@click.option("--cost", required=True, help="Unit cost (e.g. 0.80).")
@click.option("--quantity", default=0, type=int, show_default=True, help="Opening stock.")
@click.option("--threshold", default=None, type=int, help="Reorder threshold.")
@click.option("--description", default="", help="Free-text description.")
@click.pass_obj
def product_add(
    settings: Settings,
    name: str,
    category: str,
    price: str,
    cost: str,
    quantity: int,
    threshold: int | None,
    description: str,
) -> None:
    """Add a new product to the catalog."""
    try:
        with app_context(settings) as ctx:
            product = ctx.products.create(
                name=name,
                category=_canonical_category(category),
                price=price,
                cost=cost,
                quantity=quantity,
                threshold=threshold,
                description=description,
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price} ({product.quantity} in stock)")


@click.command("update")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--name", default=None, help="New name.")
@click.option("--category", default=None, type=_CATEGORY, help="New category.")
@click.option("--price", default=None, help="New price.")
@click.option("--cost", default=None, help="New cost.")
@click.option("--quantity", default=None, type=int, help="New stock level (recorded in the ledger).")
@click.option("--threshold", default=None, type=int, help="New reorder threshold.")
@click.option("--description", default=None, help="New description.")
@click.pass_obj
def product_update(settings: Settings, product_id: int, **fields) -> None:
    """Update a product's fields."""
    changes = {key: value for key, value in fields.items() if value is not None}
    if not changes:
        raise click.ClickException("Nothing to update")
    if "category" in changes:
        changes["category"] = _canonical_category(changes["category"])

    try:
        with app_context(settings) as ctx:
            product = ctx.products.update(product_id, **changes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' updated")


@click.command("delete")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.confirmation_option(prompt="Delete this product?")
@click.pass_obj
def product_delete(settings: Settings, product_id: int) -> None:
    """Delete a product no order refers to."""
    try:
        with app_context(settings) as ctx:
            ctx.products.delete(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} deleted")


@click.command("export")
@click.argument("output", type=click.File("w", encoding="utf-8"), default="-")
@click.pass_obj
def product_export(settings: Settings, output) -> None:
    """Export the catalog as CSV (to stdout by default)."""
    try:
        with app_context(settings) as ctx:
            products = ctx.products.list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        raise click.ClickException("No products to export")
    count = export_products(products, output)
    if output.name != "<stdout>":
        click.echo(f"{count} products exported to {output.name}")


@click.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def product_import(settings: Settings, source: Path) -> None:
    """Import products from a CSV file (matched by name)."""
    try:
        with app_context(settings) as ctx, source.open(encoding="utf-8", newline="") as stream:
            result = import_products(ctx.products, stream)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Import finished: {result.created} added, {result.updated} updated, "
        f"{result.skipped} skipped"
    )


@click.command("seed")
@click.pass_obj
def seed(settings: Settings) -> None:
    """Load the demo catalog into an empty store."""
    try:
        with app_context(settings) as ctx:
            created = seed_demo_products(ctx.store, ctx.products)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if created:
        click.echo(f"{created} demo products added")
    else:
        click.echo("Catalog is not empty, nothing to do")
