"""CLI commands for invoices."""

from __future__ import annotations

import click

from cafe.domain.exceptions import DomainException
from cafe.domain.model.invoice import Invoice, InvoiceStatus
from cafe.infrastructure.bootstrap import app_context
from cafe.infrastructure.config import Settings
from cafe.infrastructure.invoice_csv import export_invoices

_STATUS = click.Choice([s.value for s in InvoiceStatus], case_sensitive=False)

SHOP_NAME = "Café Parisien"


def render_invoice(invoice: Invoice) -> str:
    """Printable plain-text version of an invoice."""
    width = 60
    lines = [
        SHOP_NAME.center(width),
        f"INVOICE #{invoice.id}".center(width),
        "",
        f"Date:    {invoice.date}",
        f"Client:  {invoice.client_name}",
        f"Order:   #{invoice.order_id}",
        f"Status:  {invoice.status.value}",
        "",
        f"{'Product':<26} {'Qty':>5} {'Unit price':>12} {'Subtotal':>12}",
        "-" * width,
    ]
    for line in invoice.lines:
        lines.append(
            f"{line.product_name:<26} {line.quantity.value:>5} "
            f"{str(line.unit_price):>12} {str(line.subtotal):>12}"
        )
    lines.append("-" * width)
    lines.append(f"{'TOTAL':<45} {str(invoice.total):>14}")
    if invoice.notes:
        lines.extend(["", f"Notes: {invoice.notes}"])
    return "\n".join(lines)


@click.command("generate")
@click.option("--order", "order_id", required=True, type=int, help="Order to invoice (Done or Delivered).")
@click.option("--date", "invoice_date", default=None, help="Invoice date (YYYY-MM-DD), today by default.")
@click.option("--status", type=_STATUS, default=InvoiceStatus.PENDING.value, show_default=True)
@click.option("--notes", default="", help="Free-text notes.")
@click.pass_obj
def invoice_generate(
    settings: Settings,
    order_id: int,
    invoice_date: str | None,
    status: str,
    notes: str,
) -> None:
    """Generate the invoice of an order."""
    try:
        with app_context(settings) as ctx:
            invoice = ctx.invoices.generate(order_id, date=invoice_date, status=status, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice #{invoice.id} generated for order #{order_id} ({invoice.total})")


@click.command("list")
@click.option("--from", "start_date", default=None, help="Earliest date (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, help="Latest date (YYYY-MM-DD).")
@click.option("--client", default=None, help="Part of the client name.")
@click.pass_obj
def invoice_list(settings: Settings, start_date: str | None, end_date: str | None, client: str | None) -> None:
    """List invoices, most recent first."""
    try:
        with app_context(settings) as ctx:
            invoices = ctx.invoices.filter(start_date, end_date, client)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo(f"{'ID':<5} {'Date':<11} {'Client':<24} {'Amount':>10} Status")
    click.echo("-" * 62)
    for i in invoices:
        click.echo(f"{i.id:<5} {i.date:<11} {i.client_name:<24} {str(i.total):>10} {i.status.value}")


@click.command("export")
@click.argument("output", type=click.File("w", encoding="utf-8"), default="-")
@click.option("--from", "start_date", default=None, help="Earliest date (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, help="Latest date (YYYY-MM-DD).")
@click.option("--client", default=None, help="Part of the client name.")
@click.pass_obj
def invoice_export(
    settings: Settings,
    output,
    start_date: str | None,
    end_date: str | None,
    client: str | None,
) -> None:
    """Export the (filtered) invoice list as CSV (to stdout by default)."""
    try:
        with app_context(settings) as ctx:
            invoices = ctx.invoices.filter(start_date, end_date, client)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not invoices:
        raise click.ClickException("No invoices to export")
    count = export_invoices(invoices, output)
    if output.name != "<stdout>":
        click.echo(f"{count} invoices exported to {output.name}")


@click.command("show")
@click.option("--id", "invoice_id", required=True, type=int, help="Invoice ID.")
@click.pass_obj
def invoice_show(settings: Settings, invoice_id: int) -> None:
    """Print an invoice."""
    try:
        with app_context(settings) as ctx:
            invoice = ctx.invoices.get(invoice_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(render_invoice(invoice))


@click.command("status")
@click.option("--id", "invoice_id", required=True, type=int, help="Invoice ID.")
@click.option("--status", required=True, type=_STATUS, help="New status.")
@click.pass_obj
def invoice_status(settings: Settings, invoice_id: int, status: str) -> None:
    """Change the status of an invoice (e.g. mark it Paid)."""
    try:
        with app_context(settings) as ctx:
            invoice = ctx.invoices.update(invoice_id, status=status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice #{invoice.id} is now {invoice.status.value}")


@click.command("delete")
@click.option("--id", "invoice_id", required=True, type=int, help="Invoice ID.")
@click.confirmation_option(prompt="Delete this invoice?")
@click.pass_obj
def invoice_delete(settings: Settings, invoice_id: int) -> None:
    """Delete an invoice."""
    try:
        with app_context(settings) as ctx:
            ctx.invoices.delete(invoice_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice #{invoice_id} deleted.")


@click.command("dashboard")
@click.option("--day", default=None, help="Day to report on (YYYY-MM-DD), today by default.")
@click.pass_obj
def dashboard(settings: Settings, day: str | None) -> None:
    """Show today's orders, stock on hand, revenue and stock alerts."""
    try:
        with app_context(settings) as ctx:
            dto = ctx.dashboard.handle(day)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{SHOP_NAME} - {dto.day}")
    click.echo(f"  Orders today:    {dto.orders_today}")
    click.echo(f"  Units in stock:  {dto.units_in_stock}")
    click.echo(f"  Revenue (paid):  {dto.revenue}")
    if dto.low_stock:
        click.echo()
        click.echo(f"Stock alerts ({len(dto.low_stock)}):")
        for item in dto.low_stock:
            label = "OUT" if item.is_out else "low"
            click.echo(f"  [{label}] #{item.product_id} {item.name}: {item.quantity} (alert at {item.threshold})")
