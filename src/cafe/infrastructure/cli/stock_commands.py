"""CLI commands for stock adjustments and the stock ledger."""

from __future__ import annotations

import click

from cafe.domain.exceptions import DomainException
from cafe.domain.model.stock_movement import REASON_RECEPTION
from cafe.infrastructure.bootstrap import app_context
from cafe.infrastructure.config import Settings


@click.command("adjust")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--mode", type=click.Choice(["add", "remove", "set"]), default="add",
              show_default=True, help="Add to, remove from, or set the stock.")
@click.option("--quantity", required=True, type=int, help="Units to add/remove, or the new level.")
@click.option("--reason", default=REASON_RECEPTION, show_default=True, help="Reason recorded in the ledger.")
@click.option("--note", default="", help="Free-text note.")
@click.pass_obj
def stock_adjust(settings: Settings, product_id: int, mode: str, quantity: int, reason: str, note: str) -> None:
    """Adjust the stock of a product."""
    try:
        with app_context(settings) as ctx:
            if mode == "add":
                movement = ctx.stock.receive(product_id, quantity, reason, note)
            elif mode == "remove":
                movement = ctx.stock.remove(product_id, quantity, reason, note)
            else:
                movement = ctx.stock.set_quantity(product_id, quantity, reason, note)
            product = ctx.products.get(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if movement is None:
        click.echo(f"Stock of '{product.name}' already at {product.quantity}, nothing recorded")
        return
    click.echo(f"Stock of '{product.name}' {movement.delta:+d} -> {product.quantity}")


@click.command("history")
@click.option("--id", "product_id", default=None, type=int, help="Only this product.")
@click.option("--limit", default=20, show_default=True, type=int, help="Number of entries.")
@click.pass_obj
def stock_history(settings: Settings, product_id: int | None, limit: int) -> None:
    """Show the stock ledger, newest first."""
    try:
        with app_context(settings) as ctx:
            movements = ctx.stock.history(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not movements:
        click.echo("No stock movements recorded.")
        return

    click.echo(f"{'Date':<17} {'Product':<24} {'Change':>7} {'Reason':<15} {'By':<8} Note")
    click.echo("-" * 90)
    for m in movements[:limit]:
        click.echo(
            f"{m.timestamp[:16].replace('T', ' '):<17} {m.product_name:<24} {m.delta:>+7d} "
            f"{m.reason:<15} {m.actor:<8} {m.note}"
        )
