"""Domain service: read-only sales statistics.

Report value types, period windows, and in-memory versions of the report
aggregations.  The SQL ledger computes the same figures with GROUP BY
queries; these functions give the same results over loaded sales.  Only
COMPLETED sales count; nothing here writes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta

from pos.domain.model.product import Product
from pos.domain.model.sale import Sale
from pos.domain.model.sale_status import SaleStatus
from pos.domain.model.value_objects import Money

CHART_PERIODS = ("week", "month", "year")


@dataclass(frozen=True)
class PeriodSummary:
    total_sales: int
    total_revenue: Money
    total_items: int


@dataclass(frozen=True)
class ProductSales:
    product_id: str
    name: str
    sku: str
    total_quantity: int
    total_revenue: Money


@dataclass(frozen=True)
class ChartBucket:
    year: int
    month: int
    day: int | None
    total_sales: int
    total_revenue: Money


@dataclass(frozen=True)
class CategorySales:
    category: str
    total_quantity: int
    total_revenue: Money
    sales_count: int


# --- Windows ------------------------------------------------------------------


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now).replace(day=1)


def start_of_year(now: datetime) -> datetime:
    return start_of_month(now).replace(month=1)


def chart_window(period: str, now: datetime) -> tuple[datetime, str]:
    """Return (window start, bucket granularity) for a chart period.

    Unknown periods fall back to ``week``.
    """
    if period == "month":
        first = start_of_month(now)
        previous = (first - timedelta(days=1)).replace(day=1)
        return previous, "day"
    if period == "year":
        return start_of_year(now), "month"
    return now - timedelta(days=7), "day"


def category_window(period: str, now: datetime) -> datetime:
    """Window start for category breakdowns; unknown periods mean ``month``."""
    if period == "week":
        return now - timedelta(days=7)
    if period == "year":
        return start_of_year(now)
    return start_of_month(now)


# --- Aggregations -------------------------------------------------------------


def _completed(sales: Iterable[Sale]) -> list[Sale]:
    return [s for s in sales if s.status is SaleStatus.COMPLETED]


def summarize(sales: Iterable[Sale]) -> PeriodSummary:
    completed = _completed(sales)
    revenue = Money.zero()
    for sale in completed:
        revenue = revenue + sale.total
    return PeriodSummary(
        total_sales=len(completed),
        total_revenue=revenue,
        total_items=sum(s.item_count for s in completed),
    )


def top_products(
    sales: Iterable[Sale],
    products: Mapping[str, Product],
    limit: int = 5,
) -> list[ProductSales]:
    """Best sellers by quantity, then name.  Lines whose product is gone are skipped."""
    quantities: dict[str, int] = {}
    revenues: dict[str, Money] = {}
    for sale in _completed(sales):
        for line in sale.items:
            if line.product_id not in products:
                continue
            quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity.value
            revenues[line.product_id] = revenues.get(line.product_id, Money.zero()) + line.line_total

    ranked = sorted(quantities, key=lambda pid: (-quantities[pid], products[pid].name))
    return [
        ProductSales(
            product_id=pid,
            name=products[pid].name,
            sku=products[pid].sku,
            total_quantity=quantities[pid],
            total_revenue=revenues[pid],
        )
        for pid in ranked[:limit]
    ]


def bucket_sales(sales: Iterable[Sale], granularity: str) -> list[ChartBucket]:
    """Group sales per ``day`` or per ``month``, oldest bucket first."""
    counts: dict[tuple[int, int, int | None], int] = {}
    revenues: dict[tuple[int, int, int | None], Money] = {}
    for sale in _completed(sales):
        ts = sale.created_at
        key = (ts.year, ts.month, ts.day if granularity == "day" else None)
        counts[key] = counts.get(key, 0) + 1
        revenues[key] = revenues.get(key, Money.zero()) + sale.total

    return [
        ChartBucket(
            year=key[0],
            month=key[1],
            day=key[2],
            total_sales=counts[key],
            total_revenue=revenues[key],
        )
        for key in sorted(counts, key=lambda k: (k[0], k[1], k[2] or 0))
    ]


def sales_by_category(
    sales: Iterable[Sale],
    products: Mapping[str, Product],
) -> list[CategorySales]:
    quantities: dict[str, int] = {}
    revenues: dict[str, Money] = {}
    lines: dict[str, int] = {}
    for sale in _completed(sales):
        for line in sale.items:
            product = products.get(line.product_id)
            if product is None:
                continue
            category = product.category
            quantities[category] = quantities.get(category, 0) + line.quantity.value
            revenues[category] = revenues.get(category, Money.zero()) + line.line_total
            lines[category] = lines.get(category, 0) + 1

    ranked = sorted(revenues, key=lambda c: (-revenues[c].amount, c))
    return [
        CategorySales(
            category=category,
            total_quantity=quantities[category],
            total_revenue=revenues[category],
            sales_count=lines[category],
        )
        for category in ranked
    ]


def low_stock(products: Iterable[Product], threshold: int) -> list[Product]:
    """Active products at or below ``threshold``, lowest stock first."""
    found = [p for p in products if p.is_active and p.stock <= threshold]
    return sorted(found, key=lambda p: (p.stock, p.name, p.sku))
