"""CLI commands for the Sale aggregate."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from pos.application.cancel_sale import CancelSaleHandler
from pos.application.create_sale import CreateSaleHandler
from pos.application.dto import CustomerInfo, SaleDTO, SaleItemSpec
from pos.application.list_sales import ListSalesHandler
from pos.application.retry import run_with_retry
from pos.application.show_sale import ShowSaleHandler
from pos.application.update_sale import UpdateSaleHandler
from pos.domain.exceptions import DomainException
from pos.domain.model.sale import PaymentMethod
from pos.domain.model.sale_status import SaleStatus
from pos.infrastructure.bootstrap import unit_of_work
from pos.infrastructure.config import get_settings

_PAYMENT_CHOICES = click.Choice([m.value for m in PaymentMethod], case_sensitive=False)
_STATUS_CHOICES = click.Choice([s.value for s in SaleStatus], case_sensitive=False)


def _parse_items(raw: str) -> list[SaleItemSpec]:
    """Parse 'PRODUCT_ID:3,PRODUCT_ID:5' into SaleItemSpec list."""
    specs: list[SaleItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(SaleItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_sale(dto: SaleDTO) -> None:
    """Shared formatting for displaying a sale."""
    click.echo(f"Sale {dto.sale_number} (#{dto.id})  status={dto.status}  payment={dto.payment_method}")
    if dto.customer_name or dto.customer_phone:
        click.echo(f"Customer: {dto.customer_name or '-'}  {dto.customer_phone or ''}".rstrip())
    click.echo(f"Created:  {dto.created_at}")
    if dto.notes:
        click.echo(f"Notes:    {dto.notes}")
    click.echo()

    click.echo(f"  {'Product':<20} {'SKU':<12} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*60}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.sku:<12} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*60}")
    click.echo(f"  {'Subtotal':<40} {dto.subtotal:>20}")
    click.echo(f"  {'Tax':<40} {dto.tax:>20}")
    click.echo(f"  {'Discount':<40} {dto.discount:>20}")
    click.echo(f"  {'Total':<40} {dto.total:>20}")


@click.command("create")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--payment", "payment_method", required=True, type=_PAYMENT_CHOICES, help="Payment method.")
@click.option("--discount", default="0", show_default=True, help="Discount amount.")
@click.option("--tax", default="0", show_default=True, help="Tax amount.")
@click.option("--customer-name", default=None, help="Customer name.")
@click.option("--customer-phone", default=None, help="Customer phone.")
@click.option("--notes", default=None, help="Free-text notes.")
@click.option(
    "--status",
    default=SaleStatus.COMPLETED.value,
    show_default=True,
    type=click.Choice([SaleStatus.PENDING.value, SaleStatus.COMPLETED.value]),
    help="Initial status.",
)
def sale_create(
    items: str,
    payment_method: str,
    discount: str,
    tax: str,
    customer_name: str | None,
    customer_phone: str | None,
    notes: str | None,
    status: str,
) -> None:
    """Record a new sale (deducts stock for every item)."""
    specs = _parse_items(items)
    handler = CreateSaleHandler(unit_of_work(), sale_number_prefix=get_settings().sale_number_prefix)

    try:
        dto = run_with_retry(
            lambda: handler.handle(
                item_specs=specs,
                payment_method=payment_method,
                discount=discount,
                tax=tax,
                customer=CustomerInfo(name=customer_name, phone=customer_phone),
                notes=notes,
                status=status,
            )
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Sale {dto.sale_number} created.")
    _display_sale(dto)


@click.command("show")
@click.option("--id", "sale_id", type=int, default=None, help="Sale ID to display.")
@click.option("--number", "sale_number", default=None, help="Sale number, e.g. SALE-000001.")
def sale_show(sale_id: int | None, sale_number: str | None) -> None:
    """Show details of an existing sale."""
    if (sale_id is None) == (sale_number is None):
        raise click.UsageError("Give exactly one of --id or --number.")
    handler = ShowSaleHandler(unit_of_work())

    try:
        if sale_id is not None:
            dto = handler.handle(sale_id)
        else:
            dto = handler.handle_by_number(sale_number)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_sale(dto)


@click.command("list")
@click.option("--status", type=_STATUS_CHOICES, default=None, help="Only sales with this status.")
@click.option("--from", "start", type=click.DateTime(["%Y-%m-%d"]), default=None, help="First day (UTC).")
@click.option("--to", "end", type=click.DateTime(["%Y-%m-%d"]), default=None, help="Last day (UTC), inclusive.")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
def sale_list(
    status: str | None,
    start: datetime | None,
    end: datetime | None,
    page: int,
    limit: int,
) -> None:
    """List sales, newest first."""
    if start is not None:
        start = start.replace(tzinfo=timezone.utc)
    if end is not None:
        end = end.replace(hour=23, minute=59, second=59, microsecond=999999, tzinfo=timezone.utc)

    handler = ListSalesHandler(unit_of_work())
    try:
        result = handler.handle(status=status, start=start, end=end, page=page, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.sales:
        click.echo("No sales found.")
        return

    click.echo(f"{'ID':<6} {'Number':<14} {'Status':<10} {'Payment':<8} {'Items':>5} {'Total':>12}  Created")
    click.echo("-" * 82)
    for s in result.sales:
        item_count = sum(i.quantity for i in s.items)
        click.echo(
            f"{s.id:<6} {s.sale_number:<14} {s.status:<10} {s.payment_method:<8} "
            f"{item_count:>5} {s.total:>12}  {s.created_at}"
        )
    click.echo(f"Page {result.page} of {result.pages} ({result.total} sales)")


@click.command("update")
@click.option("--id", "sale_id", required=True, type=int, help="Sale ID to update.")
@click.option("--status", type=_STATUS_CHOICES, default=None, help="New status.")
@click.option("--notes", default=None, help="Replace the notes.")
def sale_update(sale_id: int, status: str | None, notes: str | None) -> None:
    """Change a sale's status and/or notes."""
    handler = UpdateSaleHandler(unit_of_work())

    try:
        dto = run_with_retry(lambda: handler.handle(sale_id, status=status, notes=notes))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Sale {dto.sale_number} updated (status={dto.status}).")


@click.command("cancel")
@click.option("--id", "sale_id", required=True, type=int, help="Sale ID to cancel.")
def sale_cancel(sale_id: int) -> None:
    """Cancel a sale (restores the stock it deducted)."""
    handler = CancelSaleHandler(unit_of_work())

    try:
        dto = run_with_retry(lambda: handler.handle(sale_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Sale {dto.sale_number} cancelled, stock restored.")
