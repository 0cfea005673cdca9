"""Application service: Dashboard use case (read-only query)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from pos.domain.repository.unit_of_work import UnitOfWork
from pos.domain.service import sales_statistics as stats

DASHBOARD_LOW_STOCK_THRESHOLD = 10
TOP_PRODUCTS_LIMIT = 5


@dataclass(frozen=True)
class DashboardDTO:
    today: stats.PeriodSummary
    monthly: stats.PeriodSummary
    yearly: stats.PeriodSummary
    total_products: int
    low_stock_products: int
    top_products: list[stats.ProductSales]


class DashboardHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, now: datetime | None = None) -> DashboardDTO:
        now = now or datetime.now(timezone.utc)
        month_start = stats.start_of_month(now)

        with self._uow as uow:
            return DashboardDTO(
                today=uow.sales.summarize_completed(stats.start_of_day(now), now),
                monthly=uow.sales.summarize_completed(month_start, now),
                yearly=uow.sales.summarize_completed(stats.start_of_year(now), now),
                total_products=uow.products.count_active(),
                low_stock_products=uow.products.count_active(max_stock=DASHBOARD_LOW_STOCK_THRESHOLD),
                top_products=uow.sales.top_products(month_start, now, limit=TOP_PRODUCTS_LIMIT),
            )
