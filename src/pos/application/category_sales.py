"""Application service: Category Sales use case (read-only query)."""

from __future__ import annotations

from datetime import datetime, timezone

from pos.domain.repository.unit_of_work import UnitOfWork
from pos.domain.service import sales_statistics as stats


class CategorySalesHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, period: str = "month", now: datetime | None = None) -> list[stats.CategorySales]:
        now = now or datetime.now(timezone.utc)
        start = stats.category_window(period, now)

        with self._uow as uow:
            return uow.sales.sales_by_category(start, now)
