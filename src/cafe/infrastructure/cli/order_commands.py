"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from cafe.application.dto import OrderLineSpec
from cafe.application.product_service import ProductService
from cafe.domain.exceptions import DomainException
from cafe.domain.model.order import Order, OrderStatus
from cafe.infrastructure.bootstrap import app_context
from cafe.infrastructure.config import Settings

_STATUS = click.Choice([s.value for s in OrderStatus], case_sensitive=False)


def _parse_items(raw: str) -> list[tuple[str, int]]:
    """Parse 'Espresso:2,7:1' into (product, quantity) pairs.

    A product is given by its ID or its exact name.
    """
    pairs: list[tuple[str, int]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'Product:Quantity'."
            )
        product, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product}'."
            )
        pairs.append((product.strip(), qty))
    return pairs


def _to_specs(products: ProductService, pairs: list[tuple[str, int]]) -> list[OrderLineSpec]:
    specs: list[OrderLineSpec] = []
    for ref, qty in pairs:
        if ref.isdigit():
            specs.append(OrderLineSpec(product_id=int(ref), quantity=qty))
            continue
        product = products.find_by_name(ref)
        if product is None:
            raise click.ClickException(f"Product not found: '{ref}'")
        specs.append(OrderLineSpec(product_id=product.id, quantity=qty))  # type: ignore[arg-type]
    return specs


def _display_order(order: Order) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{order.id}  (status={order.status.value})")
    click.echo(f"Client: {order.client_name}")
    click.echo(f"Date:   {order.date}")
    if order.notes:
        click.echo(f"Notes:  {order.notes}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Subtotal':>10}")
    click.echo(f"  {'-'*51}")
    for line in order.lines:
        click.echo(
            f"  {line.product_name:<24} {line.quantity.value:>5} "
            f"{str(line.unit_price):>10} {str(line.subtotal):>10}"
        )
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Order Total':<31} {str(order.total):>20}")


@click.command("create")
@click.option("--client", required=True, help="Client name.")
@click.option("--items", required=True, help="Items as 'Product:Qty,Product:Qty' (ID or name).")
@click.option("--date", "order_date", default=None, help="Order date (YYYY-MM-DD), today by default.")
@click.option("--status", type=_STATUS, default=OrderStatus.PENDING.value, show_default=True)
@click.option("--notes", default="", help="Free-text notes.")
@click.pass_obj
def order_create(
    settings: Settings,
    client: str,
    items: str,
    order_date: str | None,
    status: str,
    notes: str,
) -> None:
    """Create a new order."""
    pairs = _parse_items(items)

    try:
        with app_context(settings) as ctx:
            order = ctx.orders.create(
                client_name=client,
                lines=_to_specs(ctx.products, pairs),
                date=order_date,
                status=status,
                notes=notes,
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Order created.")
    _display_order(order)


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--client", default=None, help="New client name.")
@click.option("--items", default=None, help="Replacement items as 'Product:Qty,...'.")
@click.option("--date", "order_date", default=None, help="New date (YYYY-MM-DD).")
@click.option("--status", type=_STATUS, default=None)
@click.option("--notes", default=None, help="New notes.")
@click.pass_obj
def order_update(
    settings: Settings,
    order_id: int,
    client: str | None,
    items: str | None,
    order_date: str | None,
    status: str | None,
    notes: str | None,
) -> None:
    """Edit an existing order (the total is recomputed)."""
    pairs = _parse_items(items) if items else None

    try:
        with app_context(settings) as ctx:
            order = ctx.orders.update(
                order_id,
                client_name=client,
                lines=_to_specs(ctx.products, pairs) if pairs is not None else None,
                date=order_date,
                status=status,
                notes=notes,
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Order updated.")
    _display_order(order)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(settings: Settings, order_id: int) -> None:
    """Show details of an existing order."""
    try:
        with app_context(settings) as ctx:
            order = ctx.orders.get(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(order)


@click.command("list")
@click.pass_obj
def order_list(settings: Settings) -> None:
    """List all orders, most recent first."""
    try:
        with app_context(settings) as ctx:
            orders = ctx.orders.list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<5} {'Date':<11} {'Client':<24} {'Total':>10} Status")
    click.echo("-" * 62)
    for o in orders:
        click.echo(f"{o.id:<5} {o.date:<11} {o.client_name:<24} {str(o.total):>10} {o.status.value}")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--status", required=True, type=_STATUS, help="New status.")
@click.pass_obj
def order_status(settings: Settings, order_id: int, status: str) -> None:
    """Change the status of an order."""
    try:
        with app_context(settings) as ctx:
            order = ctx.orders.set_status(order_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order.id} is now {order.status.value}")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
@click.confirmation_option(prompt="Delete this order?")
@click.pass_obj
def order_delete(settings: Settings, order_id: int) -> None:
    """Delete an order."""
    try:
        with app_context(settings) as ctx:
            ctx.orders.delete(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")
