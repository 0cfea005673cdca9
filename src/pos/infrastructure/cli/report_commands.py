"""CLI commands for read-only sales reports."""

from __future__ import annotations

import calendar

import click

from pos.application.category_sales import CategorySalesHandler
from pos.application.dashboard import DashboardHandler
from pos.application.low_stock import LowStockHandler
from pos.application.sales_chart import SalesChartHandler
from pos.domain.exceptions import DomainException
from pos.domain.service.sales_statistics import CHART_PERIODS, PeriodSummary
from pos.infrastructure.bootstrap import unit_of_work
from pos.infrastructure.config import get_settings


def _summary_line(label: str, summary: PeriodSummary) -> str:
    return (
        f"  {label:<12} {summary.total_sales:>6} sales  "
        f"{summary.total_items:>6} items  {str(summary.total_revenue):>12}"
    )


@click.command("dashboard")
def report_dashboard() -> None:
    """Today / this month / this year at a glance."""
    try:
        dto = DashboardHandler(unit_of_work()).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Completed sales")
    click.echo(_summary_line("Today", dto.today))
    click.echo(_summary_line("This month", dto.monthly))
    click.echo(_summary_line("This year", dto.yearly))
    click.echo()
    click.echo(f"Active products:    {dto.total_products}")
    click.echo(f"Low stock products: {dto.low_stock_products}")

    if dto.top_products:
        click.echo()
        click.echo("Top products this month")
        click.echo(f"  {'Product':<20} {'SKU':<12} {'Qty':>6} {'Revenue':>12}")
        click.echo(f"  {'-'*53}")
        for p in dto.top_products:
            click.echo(
                f"  {p.name:<20} {p.sku:<12} {p.total_quantity:>6} {str(p.total_revenue):>12}"
            )


@click.command("chart")
@click.option("--period", type=click.Choice(CHART_PERIODS), default="week", show_default=True)
def report_chart(period: str) -> None:
    """Completed sales per day (week, month) or per month (year)."""
    try:
        buckets = SalesChartHandler(unit_of_work()).handle(period=period)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not buckets:
        click.echo("No completed sales in this period.")
        return

    click.echo(f"{'Period':<12} {'Sales':>6} {'Revenue':>12}")
    click.echo("-" * 32)
    for b in buckets:
        if b.day is None:
            label = f"{calendar.month_abbr[b.month]} {b.year}"
        else:
            label = f"{b.year:04d}-{b.month:02d}-{b.day:02d}"
        click.echo(f"{label:<12} {b.total_sales:>6} {str(b.total_revenue):>12}")


@click.command("categories")
@click.option("--period", type=click.Choice(CHART_PERIODS), default="month", show_default=True)
def report_categories(period: str) -> None:
    """Completed sales broken down by product category."""
    try:
        rows = CategorySalesHandler(unit_of_work()).handle(period=period)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not rows:
        click.echo("No completed sales in this period.")
        return

    click.echo(f"{'Category':<20} {'Lines':>6} {'Qty':>6} {'Revenue':>12}")
    click.echo("-" * 47)
    for r in rows:
        click.echo(
            f"{r.category or '(none)':<20} {r.sales_count:>6} {r.total_quantity:>6} "
            f"{str(r.total_revenue):>12}"
        )


@click.command("low-stock")
@click.option("--threshold", type=int, default=None, help="Stock level to flag (default from settings).")
def report_low_stock(threshold: int | None) -> None:
    """Active products at or below the low-stock threshold."""
    if threshold is None:
        threshold = get_settings().low_stock_threshold

    try:
        products = LowStockHandler(unit_of_work()).handle(threshold=threshold)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo(f"No active products at or below {threshold}.")
        return

    click.echo(f"{'SKU':<12} {'Name':<20} {'Stock':>6}")
    click.echo("-" * 40)
    for p in products:
        click.echo(f"{p.sku:<12} {p.name:<20} {p.stock:>6}")
