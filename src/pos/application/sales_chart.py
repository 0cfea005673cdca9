"""Application service: Sales Chart use case (read-only query)."""

from __future__ import annotations

from datetime import datetime, timezone

from pos.domain.repository.unit_of_work import UnitOfWork
from pos.domain.service import sales_statistics as stats


class SalesChartHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, period: str = "week", now: datetime | None = None) -> list[stats.ChartBucket]:
        """Completed sales bucketed per day (week, month) or per month (year)."""
        now = now or datetime.now(timezone.utc)
        start, granularity = stats.chart_window(period, now)

        with self._uow as uow:
            return uow.sales.completed_per_period(start, now, granularity)
